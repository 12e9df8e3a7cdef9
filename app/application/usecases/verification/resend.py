"""
===============================================================================
USE CASE: Resend Verification Email
===============================================================================

Business Goal:
    Reenviar el email de verificación con cuota: como máximo N emisiones
    (default 3) en una ventana móvil de 60 minutos por usuario. Cuentan TODAS
    las emisiones, incluida la del alta del usuario.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ResendVerificationEmailUseCase

Collaborators:
    - UserRepository
    - VerificationTokenRepository.count_created_since
    - IssueVerificationTokenUseCase
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID

from ....domain.repositories import UserRepository, VerificationTokenRepository
from ..results import VerificationResult, not_found, validation
from .issue_token import IssueVerificationTokenUseCase

ALREADY_VERIFIED_MESSAGE = "Email is already verified"
TOO_MANY_MESSAGE = (
    "Too many verification emails sent. Please wait before requesting another."
)
SENT_MESSAGE = "Verification email sent"
RESEND_WINDOW = timedelta(hours=1)


class ResendVerificationEmailUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        token_repository: VerificationTokenRepository,
        issuer: IssueVerificationTokenUseCase,
        *,
        max_per_hour: int = 3,
    ) -> None:
        self._users = user_repository
        self._tokens = token_repository
        self._issuer = issuer
        self._max_per_hour = int(max_per_hour)

    def execute(
        self, user_id: UUID, *, now: datetime | None = None
    ) -> VerificationResult:
        now = now or datetime.now(timezone.utc)

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return VerificationResult(
                success=False,
                message="User not found",
                error=not_found("User not found"),
            )

        if user.email_verified:
            return VerificationResult(
                success=False,
                message=ALREADY_VERIFIED_MESSAGE,
                error=validation(ALREADY_VERIFIED_MESSAGE),
            )

        recent = self._tokens.count_created_since(user.id, now - RESEND_WINDOW)
        if recent >= self._max_per_hour:
            return VerificationResult(
                success=False,
                message=TOO_MANY_MESSAGE,
                error=validation(TOO_MANY_MESSAGE),
            )

        self._issuer.execute(user, now=now)
        return VerificationResult(success=True, message=SENT_MESSAGE, user_id=user.id)
