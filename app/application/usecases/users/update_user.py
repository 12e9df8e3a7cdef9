"""
===============================================================================
USE CASE: Update User (admin)
===============================================================================

Business Goal:
    Editar nombre, rol, estado o email de un usuario.

Reglas:
    - Al menos un campo => si no, VALIDATION.
    - Usuario inexistente => NOT_FOUND.
    - Un admin no puede desactivarse a sí mismo ni cambiar su propio email.
    - Cambio de email: único (CONFLICT) y resetea email_verified.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    UpdateUserUseCase

Collaborators:
    - UserRepository
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from ....crosscutting.exceptions import UniqueViolationError
from ....domain.repositories import UserRepository
from ....identity.users import UserRole
from ..results import UserResult, conflict, not_found, validation
from .create_user import MIN_FULL_NAME_LENGTH, normalize_email


class UpdateUserUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(
        self,
        user_id: UUID,
        *,
        actor_id: UUID,
        full_name: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
        email: str | None = None,
    ) -> UserResult:
        if full_name is None and role is None and is_active is None and email is None:
            return UserResult(error=validation("No fields provided to update"))

        if full_name is not None:
            full_name = full_name.strip()
            if len(full_name) < MIN_FULL_NAME_LENGTH:
                return UserResult(
                    error=validation(
                        f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters"
                    )
                )

        user = self._users.get_user_by_id(user_id)
        if user is None:
            return UserResult(error=not_found("User not found"))

        is_self = user_id == actor_id
        if is_self and is_active is False:
            return UserResult(error=validation("You cannot deactivate your own account"))

        new_username: str | None = None
        email_verified: bool | None = None
        if email is not None:
            candidate = normalize_email(email)
            if not candidate:
                return UserResult(error=validation("Email is required"))
            if candidate != user.username:
                if is_self:
                    return UserResult(
                        error=validation("You cannot change your own email")
                    )
                if self._users.get_user_by_username(candidate) is not None:
                    return UserResult(error=conflict("Email already exists"))
                new_username = candidate
                email_verified = False

        try:
            updated = self._users.update_user(
                user_id,
                username=new_username,
                full_name=full_name,
                role=role,
                is_active=is_active,
                email_verified=email_verified,
            )
        except UniqueViolationError:
            return UserResult(error=conflict("Email already exists"))
        if updated is None:
            return UserResult(error=not_found("User not found"))
        return UserResult(user=updated)
