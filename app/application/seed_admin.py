# =============================================================================
# FILE: application/seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Seed Admin (startup)
===============================================================================

Qué es:
    Asegura que exista el usuario administrador inicial configurado en
    Settings (admin_email / admin_password / admin_name).

Patrones:
    - Task orchestration (seed)
    - Dependency Injection (repo + hasher)
    - Idempotencia (ensure-create; si existe no se toca)

CRC:
    Component: ensure_admin
    Responsibilities:
      - Resolver email normalizado y validar datos mínimos
      - Crear el admin si no existe (ADMIN, activo, email verificado,
        sin cambio de password forzado)
    Collaborators:
      - domain.repositories.UserRepository
      - identity.passwords.hash_password
      - Settings
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..identity.auth_users import normalize_username
from ..identity.passwords import hash_password
from ..identity.users import User, UserRole


def ensure_admin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str] = hash_password,
) -> User | None:
    """
    Crea el admin inicial si falta.

    Returns:
        El usuario creado, o None si deshabilitado / ya existía.
    """
    if not settings.seed_admin_on_startup:
        return None

    email = normalize_username(settings.admin_email)
    if not email or not settings.admin_password:
        raise ValueError("Seed admin is enabled but admin_email/admin_password are empty")

    existing = user_repo.get_user_by_username(email)
    if existing is not None:
        logger.info("Seed admin: user exists; skipping", extra={"email": email})
        return None

    user = user_repo.create_user(
        username=email,
        password_hash=password_hasher(settings.admin_password),
        full_name=settings.admin_name,
        role=UserRole.ADMIN,
        is_active=True,
        must_change_password=False,
        email_verified=True,
    )
    logger.info(
        "Seed admin: user created",
        extra={"email": email, "user_id": str(user.id)},
    )
    return user
