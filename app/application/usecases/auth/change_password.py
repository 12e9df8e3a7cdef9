"""
===============================================================================
USE CASE: Change Password (self-service)
===============================================================================

Business Goal:
    El usuario cambia su contraseña verificando la actual. En éxito se limpia
    must_change_password (fin del onboarding con contraseña temporal).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ChangePasswordUseCase

Responsibilities:
    - Verificar la contraseña actual (Argon2).
    - Validar longitud mínima de la nueva.
    - Persistir el nuevo hash y bajar el flag must_change_password.

Collaborators:
    - UserRepository
    - identity.passwords
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....domain.repositories import UserRepository
from ....identity.passwords import hash_password, verify_password
from ..results import UserResult, not_found, validation

MIN_PASSWORD_LENGTH = 8


class ChangePasswordUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self, user_id: UUID, *, current_password: str, new_password: str
    ) -> UserResult:
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            return UserResult(
                error=validation(
                    f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
                )
            )

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return UserResult(error=not_found("User not found"))

        if not verify_password(current_password, user.password_hash):
            return UserResult(error=validation("Incorrect current password"))

        updated = self._users.update_user(
            user_id,
            password_hash=hash_password(new_password),
            must_change_password=False,
        )
        if updated is None:
            return UserResult(error=not_found("User not found"))
        return UserResult(user=updated)
