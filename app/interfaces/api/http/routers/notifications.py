"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/notifications.py
===============================================================================

Name:
    Admin Notifications Router

Responsibilities:
    - POST /admin/notifications/send-welcome: dispara el workflow de
      bienvenida con la contraseña temporal recién emitida.

Collaborators:
    - application.usecases.notifications.SendWelcomeEmailUseCase
    - identity.auth_users.require_admin
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.application.usecases.notifications import SendWelcomeEmailUseCase
from app.container import get_send_welcome_use_case
from app.identity.auth_users import require_admin
from app.identity.users import User

from ..error_mapping import raise_service_error
from ..schemas.users import OkRes, SendWelcomeReq

router = APIRouter(prefix="/admin/notifications", tags=["admin-notifications"])


@router.post("/send-welcome", response_model=OkRes)
def send_welcome(
    req: SendWelcomeReq,
    use_case: SendWelcomeEmailUseCase = Depends(get_send_welcome_use_case),
    _admin: User = Depends(require_admin()),
):
    result = use_case.execute(req.user_id, req.temp_password)
    if result.error:
        raise_service_error(result.error)
    return OkRes(ok=True)
