"""
Name: Welcome Email Use Case Tests
"""

from uuid import uuid4

import pytest
from app.application.usecases.notifications import (
    WELCOME_WORKFLOW,
    SendWelcomeEmailUseCase,
)
from app.application.usecases.results import ServiceErrorKind
from app.crosscutting.exceptions import NotificationError
from app.infrastructure.services import RecordingNotificationService

pytestmark = pytest.mark.unit

LOGIN_URL = "https://app.example.com/login"


def _use_case(user_repository, notifications):
    return SendWelcomeEmailUseCase(
        user_repository, notifications, login_url=LOGIN_URL
    )


def test_sends_welcome_with_temp_password(user_repository, driver_user):
    notifications = RecordingNotificationService()

    result = _use_case(user_repository, notifications).execute(
        driver_user.id, "Tmp12345abcd"
    )

    assert result.ok is True
    (sent,) = notifications.sent
    assert sent["workflow_id"] == WELCOME_WORKFLOW == "welcome-user"
    assert sent["payload"]["tempPassword"] == "Tmp12345abcd"
    assert sent["payload"]["loginUrl"] == LOGIN_URL
    assert sent["payload"]["email"] == "driver@example.com"
    assert sent["transaction_id"].startswith(f"welcome-{driver_user.id}-")


@pytest.mark.parametrize("temp_password", ["", "   "])
def test_requires_temp_password(user_repository, driver_user, temp_password):
    result = _use_case(user_repository, RecordingNotificationService()).execute(
        driver_user.id, temp_password
    )

    assert result.error.kind == ServiceErrorKind.VALIDATION
    assert result.error.message == "Temporary password is required"


def test_unknown_user(user_repository):
    result = _use_case(user_repository, RecordingNotificationService()).execute(
        uuid4(), "Tmp12345abcd"
    )

    assert result.error.kind == ServiceErrorKind.NOT_FOUND


def test_inactive_user(user_repository, user_factory):
    user = user_factory.create(is_active=False)

    result = _use_case(user_repository, RecordingNotificationService()).execute(
        user.id, "Tmp12345abcd"
    )

    assert result.error.message == "User is inactive"


def test_provider_failure_is_internal(user_repository, driver_user):
    failing = RecordingNotificationService(fail_with=NotificationError("HTTP 500"))

    result = _use_case(user_repository, failing).execute(driver_user.id, "Tmp123")

    assert result.ok is False
    assert result.error.kind == ServiceErrorKind.INTERNAL
    assert result.error.message == "Failed to send welcome email"
