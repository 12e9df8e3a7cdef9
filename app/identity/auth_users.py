"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de Usuarios (credenciales + sesión + JWT) y RBAC

Responsabilidades:
    - Validar credenciales (username/password) de forma uniforme: usuario
      inexistente, inactivo o password incorrecto => None (sin enumeración).
    - Resolver el modo de autenticación de un request en un AuthOutcome:
        SessionAuth(principal) | BearerAuth(principal) | Unauthenticated(reason)
      `Authorization: Bearer` => SOLO camino JWT; si no, SOLO cookie de sesión.
      Nunca hay fallback entre modos.
    - Exponer dependencias FastAPI: require_auth (solo sesión),
      require_auth_universal (sesión o JWT), require_admin (universal + ADMIN).

Colaboradores:
    - identity.jwt_tokens.JwtService
    - identity.sessions.SessionManager
    - identity.passwords (Argon2)
    - container (factories inyectables vía Depends, import diferido)
    - crosscutting.error_responses: unauthorized / forbidden / internal_error

Decisiones de diseño:
    - resolve_auth_outcome es una función pura de (header, cookie) + servicios
      inyectados: testeable sin FastAPI.
    - El principal siempre es el User fresco de la DB (rol y estado vigentes).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from fastapi import Depends, Header, Request

from ..context import set_user_context
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.error_responses import forbidden, internal_error, unauthorized
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from .jwt_tokens import JwtService, TokenErrorKind, TokenVerificationError
from .passwords import burn_verification_time, verify_password
from .sessions import SessionManager
from .users import User, UserRole

AUTH_REQUIRED_MESSAGE = "Authentication required"
MISSING_BEARER_MESSAGE = "Bearer token required"
INSUFFICIENT_ROLE_MESSAGE = "Insufficient role"


# ---------------------------------------------------------------------------
# Credenciales
# ---------------------------------------------------------------------------


def normalize_username(username: str | None) -> str:
    return (username or "").strip().lower()


def authenticate_user(
    user_repository: UserRepository, username: str, password: str
) -> User | None:
    """Valida credenciales y retorna el usuario activo o None.

    Seguridad:
        - No diferenciamos “no existe” / “inactivo” / “password incorrecto”.
        - Si el usuario no existe igual pagamos el costo de Argon2.
    """
    normalized = normalize_username(username)
    if not normalized:
        burn_verification_time(password)
        return None

    user = user_repository.get_user_by_username(normalized)
    if user is None:
        burn_verification_time(password)
        return None

    if not verify_password(password, user.password_hash):
        return None

    if not user.is_active:
        logger.warning("Auth falló: usuario inactivo", extra={"user_id": str(user.id)})
        return None

    return user


# ---------------------------------------------------------------------------
# AuthOutcome (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionAuth:
    principal: User
    session_id: str


@dataclass(frozen=True, slots=True)
class BearerAuth:
    principal: User
    token: str


@dataclass(frozen=True, slots=True)
class Unauthenticated:
    reason: str
    error: TokenErrorKind | None = None


AuthOutcome = Union[SessionAuth, BearerAuth, Unauthenticated]


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def _is_bearer_header(authorization: str | None) -> bool:
    return bool(authorization) and authorization.strip().lower().startswith("bearer")


def resolve_auth_outcome(
    *,
    authorization: str | None,
    session_id: str | None,
    jwt_service: JwtService,
    session_manager: SessionManager,
    allow_bearer: bool = True,
) -> AuthOutcome:
    """
    Decide el modo por presencia del header Bearer y normaliza el resultado.

    Raises:
        TokenVerificationError(MISCONFIGURED): secreto JWT ausente (error del
        servidor, no del cliente).
    """
    if allow_bearer and _is_bearer_header(authorization):
        token = extract_bearer_token(authorization)
        if not token:
            return Unauthenticated(reason=MISSING_BEARER_MESSAGE)
        try:
            user = jwt_service.verify(token)
        except TokenVerificationError as exc:
            if exc.kind == TokenErrorKind.MISCONFIGURED:
                raise
            return Unauthenticated(reason=exc.message, error=exc.kind)
        return BearerAuth(principal=user, token=token)

    user = session_manager.resolve(session_id)
    if user is not None and session_id:
        return SessionAuth(principal=user, session_id=session_id)

    return Unauthenticated(reason=AUTH_REQUIRED_MESSAGE)


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def _authenticate_request(
    request: Request,
    authorization: str | None,
    *,
    settings: Settings,
    jwt_service: JwtService,
    session_manager: SessionManager,
    allow_bearer: bool,
) -> User:
    try:
        outcome = resolve_auth_outcome(
            authorization=authorization,
            session_id=request.cookies.get(settings.session_cookie_name),
            jwt_service=jwt_service,
            session_manager=session_manager,
            allow_bearer=allow_bearer,
        )
    except TokenVerificationError as exc:
        raise internal_error(exc.message) from exc

    if isinstance(outcome, Unauthenticated):
        raise unauthorized(outcome.reason)

    request.state.user = outcome.principal
    request.state.auth = outcome
    set_user_context(str(outcome.principal.id))
    return outcome.principal


def require_auth() -> Callable:
    """Dependency FastAPI: requiere sesión web (cookie). El header Bearer se ignora."""
    # R: import diferido; container importa use cases que importan este módulo.
    from ..container import get_jwt_service, get_session_manager

    def dependency(
        request: Request,
        settings: Settings = Depends(get_settings),
        jwt_service: JwtService = Depends(get_jwt_service),
        session_manager: SessionManager = Depends(get_session_manager),
    ) -> User:
        return _authenticate_request(
            request,
            None,
            settings=settings,
            jwt_service=jwt_service,
            session_manager=session_manager,
            allow_bearer=False,
        )

    return dependency


def require_auth_universal() -> Callable:
    """Dependency FastAPI: acepta sesión web o JWT Bearer (app móvil)."""
    from ..container import get_jwt_service, get_session_manager

    def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
        settings: Settings = Depends(get_settings),
        jwt_service: JwtService = Depends(get_jwt_service),
        session_manager: SessionManager = Depends(get_session_manager),
    ) -> User:
        return _authenticate_request(
            request,
            authorization,
            settings=settings,
            jwt_service=jwt_service,
            session_manager=session_manager,
            allow_bearer=True,
        )

    return dependency


def require_role(role: UserRole | str) -> Callable:
    """Dependency FastAPI: principal universal con un rol específico."""
    required_role = UserRole(role)
    authenticate = require_auth_universal()

    def dependency(user: User = Depends(authenticate)) -> User:
        if user.role != required_role:
            raise forbidden(INSUFFICIENT_ROLE_MESSAGE)
        return user

    return dependency


def require_admin() -> Callable:
    return require_role(UserRole.ADMIN)
