"""
===============================================================================
USE CASE: Reset User Password (admin)
===============================================================================

Business Goal:
    Generar una contraseña temporal nueva, forzar su cambio en el próximo
    login y cerrar todas las sesiones web activas del usuario.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ResetUserPasswordUseCase

Collaborators:
    - UserRepository
    - identity.sessions.SessionManager (end_all_for_user)
    - identity.passwords
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.passwords import generate_temp_password, hash_password
from ....identity.sessions import SessionManager
from ..results import ResetPasswordResult, not_found


class ResetUserPasswordUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        session_manager: SessionManager,
    ) -> None:
        self._users = user_repository
        self._sessions = session_manager

    def execute(self, user_id: UUID) -> ResetPasswordResult:
        user = self._users.get_user_by_id(user_id)
        if user is None:
            return ResetPasswordResult(error=not_found("User not found"))

        temp_password = generate_temp_password()
        updated = self._users.update_user(
            user_id,
            password_hash=hash_password(temp_password),
            must_change_password=True,
        )
        if updated is None:
            return ResetPasswordResult(error=not_found("User not found"))

        ended = self._sessions.end_all_for_user(user_id)
        logger.info(
            "Password reseteado por admin",
            extra={"user_id": str(user_id), "sessions_ended": ended},
        )
        return ResetPasswordResult(user_id=user_id, temp_password=temp_password)
