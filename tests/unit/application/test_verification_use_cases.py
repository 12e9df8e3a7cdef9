"""
Name: Email Verification Use Case Tests

Responsibilities:
  - Token issue: single active token, payload contract, provider failure tolerated
  - Verify: single use, expiry, user flag update
  - Resend: already verified, hourly quota
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from app.application.usecases.results import ServiceErrorKind
from app.application.usecases.verification import (
    IssueVerificationTokenUseCase,
    ResendVerificationEmailUseCase,
    VerifyEmailUseCase,
    build_verification_url,
)
from app.crosscutting.exceptions import NotificationError
from app.infrastructure.repositories.in_memory import (
    InMemoryVerificationTokenRepository,
)
from app.infrastructure.services import RecordingNotificationService

pytestmark = pytest.mark.unit


@pytest.fixture
def tokens(user_repository):
    return InMemoryVerificationTokenRepository(user_repository)


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest.fixture
def issuer(tokens, notifications):
    return IssueVerificationTokenUseCase(
        tokens, notifications, app_url="https://app.example.com/", ttl_hours=24
    )


def test_build_verification_url():
    assert (
        build_verification_url("https://app.example.com/", "abc")
        == "https://app.example.com/verify-email?token=abc"
    )


class TestIssueVerificationToken:
    def test_payload(self, issuer, notifications, driver_user):
        record = issuer.execute(driver_user)

        (sent,) = notifications.sent
        assert sent["workflow_id"] == "verify-email"
        assert sent["user_id"] == driver_user.id
        prefix = f"email-verification-{driver_user.id}-"
        assert sent["transaction_id"].startswith(prefix)
        assert sent["payload"] == {
            "fullName": "Driver User",
            "email": "driver@example.com",
            "verificationUrl": (
                f"https://app.example.com/verify-email?token={record.token}"
            ),
            "token": record.token,
            "expiresInHours": 24,
        }

    def test_expiry(self, issuer, driver_user):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)

        record = issuer.execute(driver_user, now=now)

        assert record.expires_at == now + timedelta(hours=24)

    def test_new_token_invalidates_previous(self, issuer, tokens, driver_user):
        first = issuer.execute(driver_user)
        second = issuer.execute(driver_user)

        now = datetime.now(timezone.utc)
        assert tokens.consume_token(first.token, now) is None
        assert tokens.consume_token(second.token, now) == driver_user.id

    def test_provider_failure_keeps_token(self, tokens, driver_user):
        failing = RecordingNotificationService(
            fail_with=NotificationError("down", not_configured=True)
        )
        issuer = IssueVerificationTokenUseCase(
            tokens, failing, app_url="https://app.example.com"
        )

        record = issuer.execute(driver_user)

        now = datetime.now(timezone.utc)
        assert tokens.consume_token(record.token, now) == driver_user.id


class TestVerifyEmail:
    def test_marks_user_verified(self, issuer, tokens, user_repository, driver_user):
        record = issuer.execute(driver_user)

        result = VerifyEmailUseCase(tokens).execute(record.token)

        assert result.success is True
        assert result.message == "Email verified successfully"
        assert result.user_id == driver_user.id
        assert user_repository.get_user_by_id(driver_user.id).email_verified is True

    def test_token_is_single_use(self, issuer, tokens, user_repository, driver_user):
        record = issuer.execute(driver_user)
        use_case = VerifyEmailUseCase(tokens)
        use_case.execute(record.token)

        result = use_case.execute(record.token)

        assert result.success is False
        assert result.error.kind == ServiceErrorKind.VALIDATION
        assert result.message == "Invalid or expired verification token"

    def test_expired_token(self, issuer, tokens, user_repository, driver_user):
        issued_at = datetime.now(timezone.utc) - timedelta(hours=25)
        record = issuer.execute(driver_user, now=issued_at)

        result = VerifyEmailUseCase(tokens).execute(record.token)

        assert result.success is False
        assert user_repository.get_user_by_id(driver_user.id).email_verified is False

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, tokens, token):
        result = VerifyEmailUseCase(tokens).execute(token)

        assert result.message == "Verification token is required"


class TestResendVerification:
    @pytest.fixture
    def resend(self, user_repository, tokens, issuer):
        return ResendVerificationEmailUseCase(
            user_repository, tokens, issuer, max_per_hour=3
        )

    def test_sends_new_email(self, resend, notifications, driver_user):
        result = resend.execute(driver_user.id)

        assert result.success is True
        assert result.message == "Verification email sent"
        assert len(notifications.sent) == 1

    def test_already_verified(self, resend, admin_user):
        result = resend.execute(admin_user.id)

        assert result.success is False
        assert result.message == "Email is already verified"

    def test_hourly_quota(self, resend, notifications, driver_user):
        for _ in range(3):
            assert resend.execute(driver_user.id).success is True

        result = resend.execute(driver_user.id)

        assert result.success is False
        assert result.error.kind == ServiceErrorKind.VALIDATION
        assert result.message.startswith("Too many verification emails sent")
        assert len(notifications.sent) == 3

    def test_unknown_user(self, resend):
        result = resend.execute(uuid4())

        assert result.error.kind == ServiceErrorKind.NOT_FOUND
