"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario (sesión web + JWT móvil)

Responsabilidades:
    - Definir el enum de roles (ADMIN / DRIVER) para autorización.
    - Definir el dataclass User (registro completo, incluye password_hash).
    - Definir SafeUser: proyección pública construida por WHITELIST explícita.

Colaboradores:
    - identity/auth_users.py: resuelve el principal (User) por sesión o JWT.
    - infrastructure/repositories/*/user.py: mapean filas -> User.
    - api/*_routes.py: responden siempre SafeUser, nunca User.

Notas:
    - to_safe_user() copia campo por campo; agregar una columna a User NO la
      expone automáticamente en la API.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Roles soportados."""

    ADMIN = "ADMIN"
    DRIVER = "DRIVER"


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario (username = email normalizado)."""

    id: UUID
    username: str
    password_hash: str
    full_name: str
    role: UserRole
    is_active: bool = True
    must_change_password: bool = True
    email_verified: bool = False
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class SafeUser(BaseModel):
    """Proyección pública del usuario (sin password_hash)."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    username: str
    full_name: str = Field(alias="fullName")
    role: UserRole
    is_active: bool = Field(alias="isActive")
    must_change_password: bool = Field(alias="mustChangePassword")
    email_verified: bool = Field(alias="emailVerified")
    last_login_at: datetime | None = Field(default=None, alias="lastLoginAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")


def to_safe_user(user: User) -> SafeUser:
    return SafeUser(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
        is_active=user.is_active,
        must_change_password=user.must_change_password,
        email_verified=user.email_verified,
        last_login_at=user.last_login_at,
        created_at=user.created_at,
    )
