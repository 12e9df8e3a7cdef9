"""
Name: Novu Notification Adapter Tests

Responsibilities:
  - Subscriber identify + workflow trigger request shapes
  - Missing API key => NotificationError(not_configured=True), no HTTP call
  - Transient errors are retried; permanent ones fail fast
"""

import json
import warnings
from uuid import uuid4

import httpx
import pytest
from app.crosscutting.exceptions import NotificationError
from app.identity.users import User, UserRole
from app.infrastructure.services.notifications import (
    NovuNotificationService,
    split_full_name,
)
from app.infrastructure.services.retry import (
    create_retry_decorator,
    is_transient_error,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def user():
    return User(
        id=uuid4(),
        username="ana@example.com",
        password_hash="x",
        full_name="Ana María López",
        role=UserRole.DRIVER,
    )


class Recorder:
    """MockTransport handler that records requests and replays statuses."""

    def __init__(self, *statuses: int) -> None:
        self.requests: list[httpx.Request] = []
        self._statuses = list(statuses) or [201]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        return httpx.Response(status, json={"data": {}})


def _service(handler, *, api_key="novu-key", max_attempts=3):
    client = httpx.Client(
        base_url="https://novu.test", transport=httpx.MockTransport(handler)
    )
    return NovuNotificationService(
        api_key=api_key,
        client=client,
        max_attempts=max_attempts,
        base_delay=0,
        max_delay=0.001,
    )


def test_trigger_identifies_then_triggers(user):
    recorder = Recorder()
    service = _service(recorder)

    service.trigger(
        "welcome-user",
        user=user,
        payload={"tempPassword": "Xy7"},
        transaction_id="welcome-1",
    )

    identify, trigger = recorder.requests
    assert identify.url.path == "/v1/subscribers"
    assert json.loads(identify.content) == {
        "subscriberId": str(user.id),
        "email": "ana@example.com",
        "firstName": "Ana",
        "lastName": "María López",
    }
    assert trigger.url.path == "/v1/events/trigger"
    assert trigger.headers["Authorization"] == "ApiKey novu-key"
    body = json.loads(trigger.content)
    assert body["name"] == "welcome-user"
    assert body["to"] == {"subscriberId": str(user.id)}
    assert body["payload"] == {"tempPassword": "Xy7"}
    assert body["transactionId"] == "welcome-1"


def test_missing_api_key_fails_without_http(user):
    recorder = Recorder()
    service = _service(recorder, api_key="")

    with pytest.raises(NotificationError) as exc_info:
        service.trigger("verify-email", user=user, payload={})

    assert exc_info.value.not_configured is True
    assert recorder.requests == []


def test_transient_error_is_retried(user):
    recorder = Recorder(503, 201, 201)
    service = _service(recorder)

    service.trigger("verify-email", user=user, payload={})

    assert len(recorder.requests) == 3


def test_permanent_error_fails_fast(user):
    recorder = Recorder(401)
    service = _service(recorder)

    with pytest.raises(NotificationError) as exc_info:
        service.trigger("verify-email", user=user, payload={})

    assert len(recorder.requests) == 1
    assert "401" in exc_info.value.message
    assert exc_info.value.not_configured is False


def test_network_error_becomes_notification_error(user):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    service = _service(handler, max_attempts=1)

    with pytest.raises(NotificationError, match="unreachable"):
        service.trigger("verify-email", user=user, payload={})


@pytest.mark.parametrize(
    "full_name,expected",
    [
        ("Ana María López", ("Ana", "María López")),
        ("Cher", ("Cher", "")),
        ("", ("", "")),
    ],
)
def test_split_full_name(full_name, expected):
    assert split_full_name(full_name) == expected


@pytest.mark.parametrize("status,transient", [(429, True), (503, True), (400, False)])
def test_is_transient_error(status, transient):
    request = httpx.Request("POST", "https://novu.test/v1/events/trigger")
    response = httpx.Response(status, request=request)
    error = httpx.HTTPStatusError("x", request=request, response=response)

    assert is_transient_error(error) is transient


def test_backoff_uses_base_delay_as_multiplier():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        retrying = create_retry_decorator(max_attempts=2, base_delay=0.5, max_delay=4)

    wait = retrying(lambda: None).retry.wait

    assert wait.multiplier == 0.5
    assert wait.max == 4
