"""
===============================================================================
USE CASE: Create User (admin)
===============================================================================

Business Goal:
    Dar de alta un usuario (DRIVER por defecto) con contraseña temporal y
    disparar la verificación de email.

Reglas:
    - username = email normalizado (strip + lower); duplicado => CONFLICT.
    - Se persiste SOLO el hash de la contraseña temporal; el texto plano se
      devuelve una única vez al admin.
    - must_change_password=True, email_verified=False.
    - La emisión del token/email de verificación nunca hace fallar el alta.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Collaborators:
    - UserRepository
    - identity.passwords (generate_temp_password, hash_password)
    - IssueVerificationTokenUseCase
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import LogisticsError, UniqueViolationError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.passwords import generate_temp_password, hash_password
from ....identity.users import UserRole
from ..results import CreatedUserResult, conflict, validation
from ..verification.issue_token import IssueVerificationTokenUseCase

MIN_FULL_NAME_LENGTH = 2


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class CreateUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        verification_issuer: IssueVerificationTokenUseCase,
    ) -> None:
        self._users = user_repository
        self._verification = verification_issuer

    def execute(
        self,
        *,
        email: str,
        full_name: str,
        role: UserRole = UserRole.DRIVER,
        is_active: bool = True,
    ) -> CreatedUserResult:
        username = normalize_email(email)
        full_name = (full_name or "").strip()

        if not username:
            return CreatedUserResult(error=validation("Email is required"))
        if len(full_name) < MIN_FULL_NAME_LENGTH:
            return CreatedUserResult(
                error=validation(
                    f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters"
                )
            )

        if self._users.get_user_by_username(username) is not None:
            return CreatedUserResult(error=conflict("Email already exists"))

        temp_password = generate_temp_password()
        try:
            user = self._users.create_user(
                username=username,
                password_hash=hash_password(temp_password),
                full_name=full_name,
                role=role,
                is_active=is_active,
                must_change_password=True,
                email_verified=False,
            )
        except UniqueViolationError:
            # R: otro alta con el mismo email ganó la carrera tras el chequeo.
            return CreatedUserResult(error=conflict("Email already exists"))

        logger.info(
            "Usuario creado",
            extra={"user_id": str(user.id), "role": user.role.value},
        )

        try:
            self._verification.execute(user)
        except LogisticsError as exc:
            logger.error(
                "Token de verificación no emitido",
                extra={"user_id": str(user.id), "error": exc.message},
            )

        return CreatedUserResult(user=user, temp_password=temp_password)
