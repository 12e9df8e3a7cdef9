"""
===============================================================================
USE CASE: Send Welcome Email (admin)
===============================================================================

Business Goal:
    Enviar al usuario el email de bienvenida (`welcome-user`) con su
    contraseña temporal y el link de login.

Reglas:
    - Usuario inexistente => NOT_FOUND; inactivo => VALIDATION.
    - A diferencia de la verificación, acá la falla del proveedor SÍ se
      propaga como INTERNAL (es la única acción del endpoint).
    - El payload contiene la contraseña temporal: nunca se loguea.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    SendWelcomeEmailUseCase

Collaborators:
    - UserRepository
    - NotificationService
===============================================================================
"""

from __future__ import annotations

import time
from uuid import UUID

from ....crosscutting.exceptions import NotificationError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....domain.services import NotificationService
from ..results import CommandResult, internal, not_found, validation

WELCOME_WORKFLOW = "welcome-user"
WELCOME_INSTRUCTION = (
    "Login with the temporary password and change it on first login."
)


class SendWelcomeEmailUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        notifications: NotificationService,
        *,
        login_url: str,
    ) -> None:
        self._users = user_repository
        self._notifications = notifications
        self._login_url = login_url

    def execute(self, user_id: UUID, temp_password: str) -> CommandResult:
        if not (temp_password or "").strip():
            return CommandResult(error=validation("Temporary password is required"))

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return CommandResult(error=not_found("User not found"))
        if not user.is_active:
            return CommandResult(error=validation("User is inactive"))

        payload = {
            "fullName": user.full_name,
            "email": user.username,
            "tempPassword": temp_password,
            "loginUrl": self._login_url,
            "instruction": WELCOME_INSTRUCTION,
        }
        try:
            self._notifications.trigger(
                WELCOME_WORKFLOW,
                user=user,
                payload=payload,
                transaction_id=f"welcome-{user.id}-{int(time.time() * 1000)}",
            )
        except NotificationError as exc:
            logger.error(
                "Email de bienvenida no enviado",
                extra={"user_id": str(user.id), "error": exc.message},
            )
            return CommandResult(error=internal("Failed to send welcome email"))

        return CommandResult(ok=True)
