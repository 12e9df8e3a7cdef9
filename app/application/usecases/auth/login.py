"""
===============================================================================
USE CASE: Login (credenciales -> usuario autenticado)
===============================================================================

Business Goal:
    Validar username/password y registrar el último login. Compartido por el
    login web (sesión) y el login móvil (JWT): el modo de credencial lo decide
    la ruta, no el caso de uso.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    LoginUseCase

Responsibilities:
    - Delegar la verificación uniforme de credenciales (sin enumeración).
    - Sellar last_login_at en éxito.

Collaborators:
    - identity.auth_users.authenticate_user
    - UserRepository.update_user
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

from ....domain.repositories import UserRepository
from ....identity.auth_users import authenticate_user
from ..results import UserResult, unauthorized

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class LoginUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self, username: str, password: str) -> UserResult:
        user = authenticate_user(self._users, username, password)
        if user is None:
            return UserResult(error=unauthorized(INVALID_CREDENTIALS_MESSAGE))

        stamped = self._users.update_user(
            user.id, last_login_at=datetime.now(timezone.utc)
        )
        return UserResult(user=stamped or user)
