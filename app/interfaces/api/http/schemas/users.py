"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para administración de usuarios y notificaciones

Responsabilidades:
    - DTOs de request (alta, patch, send-welcome) con aliases camelCase.
    - DTOs de response: SafeUser (+ tempPassword en el alta), reset, ok.

Colaboradores:
    - identity.users (SafeUser, UserRole)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.identity.users import SafeUser, UserRole


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class CreateUserReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    full_name: str = Field(..., alias="fullName", min_length=2, max_length=200)
    role: UserRole = UserRole.DRIVER
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        return v.strip()


class UpdateUserReq(BaseModel):
    """Patch parcial: los campos ausentes no se tocan."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(
        default=None, alias="fullName", min_length=2, max_length=200
    )
    role: UserRole | None = None
    is_active: bool | None = Field(default=None, alias="isActive")
    email: EmailStr | None = None


class SendWelcomeReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    temp_password: str = Field(..., alias="tempPassword", min_length=1, max_length=128)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class CreatedUserRes(SafeUser):
    temp_password: str = Field(alias="tempPassword")


class ResetPasswordRes(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(alias="userId")
    temp_password: str = Field(alias="tempPassword")


class OkRes(BaseModel):
    ok: bool = True


class MessageRes(BaseModel):
    message: str
