"""
===============================================================================
TARJETA CRC — app/api/auth_routes.py (Autenticación: sesión web, JWT móvil, email)
===============================================================================

Responsabilidades:
  - Login / logout / usuario actual con sesión server-side (cookie httpOnly).
  - Cambio de contraseña del usuario logueado (web).
  - Login / logout móvil con JWT (Bearer) y revocación por blacklist.
  - Verificación de email (GET/POST) y reenvío del email de verificación.
  - Rate limit de login por cliente (ventana fija sobre el TokenStore).

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP ↔ caso de uso.
  - Fail-safe security: si la autenticación falla, se deniega por defecto.
  - Endpoints `def` (no async): Argon2 es CPU-bound y corre en el threadpool.

Colaboradores:
  - identity.auth_users: require_auth, require_auth_universal, extract_bearer_token
  - identity.sessions.SessionManager / identity.jwt_tokens.JwtService
  - application.usecases.auth / application.usecases.verification
  - crosscutting.rate_limit.LoginRateLimiter
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Request, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..application.usecases.auth import ChangePasswordUseCase, LoginUseCase
from ..application.usecases.verification import (
    ResendVerificationEmailUseCase,
    VerifyEmailUseCase,
)
from ..container import (
    get_change_password_use_case,
    get_jwt_service,
    get_login_rate_limiter,
    get_login_use_case,
    get_resend_verification_use_case,
    get_session_manager,
    get_verify_email_use_case,
)
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    bad_request,
    internal_error,
    rate_limited,
    unauthorized,
)
from ..crosscutting.logger import logger
from ..crosscutting.rate_limit import LoginRateLimiter, get_client_identifier
from ..identity.auth_users import (
    extract_bearer_token,
    require_auth,
    require_auth_universal,
)
from ..identity.jwt_tokens import JwtService, TokenErrorKind, TokenVerificationError
from ..identity.sessions import SessionManager
from ..identity.users import SafeUser, User, to_safe_user
from ..interfaces.api.http.error_mapping import raise_service_error

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

TOO_MANY_LOGIN_ATTEMPTS_MESSAGE = "Too many login attempts. Please try again later"
TOKEN_REQUIRED_MESSAGE = "Token required"
LOGGED_OUT_MESSAGE = "Logged out"
PASSWORD_CHANGED_MESSAGE = "Password updated"


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("username")
    @classmethod
    def normalizar_username(cls, v: str) -> str:
        return v.strip().lower()


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(
        ..., alias="currentPassword", min_length=1, max_length=512
    )
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=512)


class MobileLoginResponse(BaseModel):
    token: str
    user: SafeUser


class VerifyEmailRequest(BaseModel):
    token: str | None = Field(default=None, max_length=256)


class VerificationResponse(BaseModel):
    success: bool
    message: str


class MessageResponse(BaseModel):
    message: str


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def enforce_login_rate_limit(
    request: Request,
    limiter: LoginRateLimiter = Depends(get_login_rate_limiter),
) -> None:
    """Cuenta TODOS los intentos (exitosos o no) por cliente."""
    client_id = get_client_identifier(request)
    decision = limiter.hit(client_id)
    if not decision.allowed:
        logger.warning(
            "Login rate limit excedido",
            extra={
                "client_id": client_id,
                "retry_after": decision.retry_after_seconds,
            },
        )
        raise rate_limited(
            decision.retry_after_seconds, TOO_MANY_LOGIN_ATTEMPTS_MESSAGE
        )


def _set_session_cookie(
    response: Response, sid: str, settings: Settings, max_age: int
) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sid,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=max_age,
        path="/",
    )


def _clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def _login_or_401(use_case: LoginUseCase, req: LoginRequest) -> User:
    result = use_case.execute(req.username, req.password)
    if result.error:
        raise_service_error(result.error)
    return result.user


# -----------------------------------------------------------------------------
# Sesión web (cookie)
# -----------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=SafeUser,
    tags=["auth"],
    dependencies=[Depends(enforce_login_rate_limit)],
)
def login(
    req: LoginRequest,
    response: Response,
    use_case: LoginUseCase = Depends(get_login_use_case),
    session_manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
):
    """Inicia sesión web: crea la sesión server-side y setea la cookie httpOnly."""
    user = _login_or_401(use_case, req)
    session = session_manager.start(user)
    _set_session_cookie(
        response, session.sid, settings, session_manager.max_age_seconds
    )
    return to_safe_user(user)


@router.post("/logout", tags=["auth"])
def logout(
    request: Request,
    response: Response,
    session_manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
):
    """
    Cierra sesión.

    - Idempotente: sin sesión también responde 200.
    - Siempre borra la cookie.
    """
    session_manager.end(request.cookies.get(settings.session_cookie_name))
    _clear_session_cookie(response, settings)
    return {}


@router.get("/user", response_model=SafeUser, tags=["auth"])
def current_user(user: User = Depends(require_auth())):
    return to_safe_user(user)


@router.post("/change-password", response_model=MessageResponse, tags=["auth"])
def change_password(
    req: ChangePasswordRequest,
    user: User = Depends(require_auth()),
    use_case: ChangePasswordUseCase = Depends(get_change_password_use_case),
):
    result = use_case.execute(
        user.id,
        current_password=req.current_password,
        new_password=req.new_password,
    )
    if result.error:
        raise_service_error(result.error)
    return MessageResponse(message=PASSWORD_CHANGED_MESSAGE)


# -----------------------------------------------------------------------------
# App móvil (JWT Bearer)
# -----------------------------------------------------------------------------


@router.post(
    "/auth/login-mobile",
    response_model=MobileLoginResponse,
    tags=["auth"],
    dependencies=[Depends(enforce_login_rate_limit)],
)
def login_mobile(
    req: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    user = _login_or_401(use_case, req)
    try:
        issued = jwt_service.issue(user)
    except TokenVerificationError as exc:
        raise internal_error(exc.message) from exc
    return MobileLoginResponse(token=issued.token, user=to_safe_user(user))


@router.post("/auth/logout-mobile", response_model=MessageResponse, tags=["auth"])
def logout_mobile(
    authorization: str | None = Header(None, alias="Authorization"),
    jwt_service: JwtService = Depends(get_jwt_service),
):
    """
    Revoca el JWT presentado hasta su expiración natural.

    - Sin header Bearer => 400.
    - Firma/formato inválidos => 401.
    - Token ya expirado o ya revocado => 200 (no queda nada por revocar).
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise bad_request(TOKEN_REQUIRED_MESSAGE)

    try:
        jwt_service.revoke(token)
    except TokenVerificationError as exc:
        if exc.kind == TokenErrorKind.MISCONFIGURED:
            raise internal_error(exc.message) from exc
        raise unauthorized(exc.message) from exc

    return MessageResponse(message=LOGGED_OUT_MESSAGE)


# -----------------------------------------------------------------------------
# Verificación de email
# -----------------------------------------------------------------------------


def _verify(use_case: VerifyEmailUseCase, token: str | None) -> VerificationResponse:
    result = use_case.execute(token or "")
    if result.error:
        raise_service_error(result.error)
    return VerificationResponse(success=result.success, message=result.message)


@router.get("/auth/verify-email", response_model=VerificationResponse, tags=["auth"])
def verify_email_link(
    token: str | None = Query(None, max_length=256),
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    """Link del email: /api/auth/verify-email?token=..."""
    return _verify(use_case, token)


@router.post("/auth/verify-email", response_model=VerificationResponse, tags=["auth"])
def verify_email(
    req: VerifyEmailRequest,
    use_case: VerifyEmailUseCase = Depends(get_verify_email_use_case),
):
    return _verify(use_case, req.token)


@router.post(
    "/auth/resend-verification-email",
    response_model=VerificationResponse,
    tags=["auth"],
)
def resend_verification_email(
    user: User = Depends(require_auth_universal()),
    use_case: ResendVerificationEmailUseCase = Depends(
        get_resend_verification_use_case
    ),
):
    result = use_case.execute(user.id)
    if result.error:
        raise_service_error(result.error)
    return VerificationResponse(success=result.success, message=result.message)


__all__ = ["router", "enforce_login_rate_limit"]
