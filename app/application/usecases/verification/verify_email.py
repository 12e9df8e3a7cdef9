"""
===============================================================================
USE CASE: Verify Email
===============================================================================

Business Goal:
    Consumir un token de verificación (uso único) y marcar el email del
    usuario como verificado.

Reglas:
    - Aceptado solo si existe, no expiró y nunca fue verificado.
    - Consumo del token + email_verified del usuario: una sola transacción
      en el repositorio (check-and-set).
    - El token NO se borra: queda con verified_at para evitar ambigüedad de reuso.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    VerifyEmailUseCase

Collaborators:
    - VerificationTokenRepository.consume_token
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

from ....crosscutting.logger import logger
from ....domain.repositories import VerificationTokenRepository
from ..results import VerificationResult, validation

INVALID_TOKEN_MESSAGE = "Invalid or expired verification token"
MISSING_TOKEN_MESSAGE = "Verification token is required"
VERIFIED_MESSAGE = "Email verified successfully"


class VerifyEmailUseCase:
    def __init__(self, token_repository: VerificationTokenRepository) -> None:
        self._tokens = token_repository

    def execute(
        self, token: str | None, *, now: datetime | None = None
    ) -> VerificationResult:
        token = (token or "").strip()
        if not token:
            return VerificationResult(
                success=False,
                message=MISSING_TOKEN_MESSAGE,
                error=validation(MISSING_TOKEN_MESSAGE),
            )

        user_id = self._tokens.consume_token(token, now or datetime.now(timezone.utc))
        if user_id is None:
            return VerificationResult(
                success=False,
                message=INVALID_TOKEN_MESSAGE,
                error=validation(INVALID_TOKEN_MESSAGE),
            )

        logger.info("Email verificado", extra={"user_id": str(user_id)})
        return VerificationResult(success=True, message=VERIFIED_MESSAGE, user_id=user_id)
