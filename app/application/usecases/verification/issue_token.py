"""
===============================================================================
USE CASE: Issue Email Verification Token
===============================================================================

Business Goal:
    Emitir un token opaco de verificación (24h) y enviar el email
    `verify-email` vía el proveedor de notificaciones.

Invariantes:
    - A lo sumo UN token no verificado y vigente por usuario: los anteriores
      se invalidan antes de insertar el nuevo.
    - Una falla del proveedor NO revierte el token (se puede reenviar luego).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    IssueVerificationTokenUseCase

Collaborators:
    - VerificationTokenRepository
    - NotificationService (workflow "verify-email")
===============================================================================
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timedelta, timezone

from ....crosscutting.exceptions import NotificationError
from ....crosscutting.logger import logger
from ....domain.entities import EmailVerificationToken
from ....domain.repositories import VerificationTokenRepository
from ....domain.services import NotificationService
from ....identity.users import User

VERIFY_EMAIL_WORKFLOW = "verify-email"
VERIFICATION_TOKEN_BYTES = 32


def build_verification_url(app_url: str, token: str) -> str:
    return f"{app_url.rstrip('/')}/verify-email?token={token}"


class IssueVerificationTokenUseCase:
    def __init__(
        self,
        token_repository: VerificationTokenRepository,
        notifications: NotificationService,
        *,
        app_url: str,
        ttl_hours: int = 24,
    ) -> None:
        self._tokens = token_repository
        self._notifications = notifications
        self._app_url = app_url
        self._ttl_hours = int(ttl_hours)

    def execute(
        self, user: User, *, now: datetime | None = None
    ) -> EmailVerificationToken:
        now = now or datetime.now(timezone.utc)

        self._tokens.invalidate_unverified_for_user(user.id, now)
        record = self._tokens.create_token(
            user_id=user.id,
            token=secrets.token_urlsafe(VERIFICATION_TOKEN_BYTES),
            expires_at=now + timedelta(hours=self._ttl_hours),
        )

        payload = {
            "fullName": user.full_name,
            "email": user.username,
            "verificationUrl": build_verification_url(self._app_url, record.token),
            "token": record.token,
            "expiresInHours": self._ttl_hours,
        }
        try:
            self._notifications.trigger(
                VERIFY_EMAIL_WORKFLOW,
                user=user,
                payload=payload,
                transaction_id=f"email-verification-{user.id}-{int(time.time() * 1000)}",
            )
        except NotificationError as exc:
            # R: el token queda emitido; el usuario puede pedir reenvío.
            logger.error(
                "Email de verificación no enviado",
                extra={
                    "user_id": str(user.id),
                    "error": exc.message,
                    "not_configured": exc.not_configured,
                },
            )

        return record
