"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/driver.py
===============================================================================

Name:
    Driver Router

Responsibilities:
    - GET /driver/profile: perfil del usuario autenticado (web o app móvil).

Collaborators:
    - identity.auth_users.require_auth_universal
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.identity.auth_users import require_auth_universal
from app.identity.users import SafeUser, User, to_safe_user

router = APIRouter(prefix="/driver", tags=["driver"])


@router.get("/profile", response_model=SafeUser)
def driver_profile(user: User = Depends(require_auth_universal())):
    return to_safe_user(user)
