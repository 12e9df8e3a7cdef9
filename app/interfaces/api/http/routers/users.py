"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/users.py
===============================================================================

Name:
    Admin Users Router

Responsibilities:
    - Listado (completo y paginado), alta, patch y reset de password de
      usuarios.
    - Enforce de rol ADMIN (sesión web o Bearer).
    - Responder SIEMPRE SafeUser (whitelist), nunca el registro completo.

Collaborators:
    - application.usecases.users
    - container (factories DI)
    - identity.auth_users.require_admin
    - schemas.users

Patterns:
    - Controller / Router
    - Adapter (HTTP -> UseCase)
    - Error Mapping (raise_service_error)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.application.usecases.users import (
    CreateUserUseCase,
    ListUsersUseCase,
    ResetUserPasswordUseCase,
    UpdateUserUseCase,
)
from app.container import (
    get_create_user_use_case,
    get_list_users_use_case,
    get_reset_user_password_use_case,
    get_update_user_use_case,
)
from app.crosscutting.pagination import Page, PageParams, build_page
from app.identity.auth_users import require_admin
from app.identity.users import SafeUser, User, UserRole, to_safe_user

from ..dependencies import page_params
from ..error_mapping import raise_service_error
from ..schemas.users import (
    CreateUserReq,
    CreatedUserRes,
    ResetPasswordRes,
    UpdateUserReq,
)

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=list[SafeUser])
def list_users(
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    _admin: User = Depends(require_admin()),
):
    result = use_case.execute()
    return [to_safe_user(u) for u in result.users]


@router.get("/paginated", response_model=Page[SafeUser])
def list_users_paginated(
    params: PageParams = Depends(page_params()),
    role: UserRole | None = Query(None),
    search: str | None = Query(None, max_length=200),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
    _admin: User = Depends(require_admin()),
):
    result = use_case.execute_page(params, role=role, search=search)
    return build_page([to_safe_user(u) for u in result.users], result.total, params)


@router.post("", response_model=CreatedUserRes, status_code=201)
def create_user(
    req: CreateUserReq,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    _admin: User = Depends(require_admin()),
):
    """
    Alta de usuario con contraseña temporal.

    La contraseña temporal se devuelve UNA sola vez (el admin la comunica o
    dispara el welcome email).
    """
    result = use_case.execute(
        email=req.email,
        full_name=req.full_name,
        role=req.role,
        is_active=req.is_active,
    )
    if result.error:
        raise_service_error(result.error)

    safe = to_safe_user(result.user)
    return CreatedUserRes(**safe.model_dump(), temp_password=result.temp_password)


@router.patch("/{user_id}", response_model=SafeUser)
def update_user(
    user_id: UUID,
    req: UpdateUserReq,
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
    admin: User = Depends(require_admin()),
):
    result = use_case.execute(
        user_id,
        actor_id=admin.id,
        full_name=req.full_name,
        role=req.role,
        is_active=req.is_active,
        email=req.email,
    )
    if result.error:
        raise_service_error(result.error)
    return to_safe_user(result.user)


@router.post("/{user_id}/reset-password", response_model=ResetPasswordRes)
def reset_password(
    user_id: UUID,
    use_case: ResetUserPasswordUseCase = Depends(get_reset_user_password_use_case),
    _admin: User = Depends(require_admin()),
):
    """Genera una nueva contraseña temporal y cierra todas las sesiones del usuario."""
    result = use_case.execute(user_id)
    if result.error:
        raise_service_error(result.error)
    return ResetPasswordRes(user_id=result.user_id, temp_password=result.temp_password)
