"""
===============================================================================
TARJETA CRC — identity/jwt_tokens.py
===============================================================================

Módulo:
    Emisión / verificación / revocación de JWT (clientes móviles)

Responsabilidades:
    - Emitir JWT firmados (HS256) con claims {id, username, role, iat, exp}.
    - Verificar en orden: revocación -> firma/formato -> expiración -> usuario
      vigente en DB (existe y está activo).
    - Revocar tokens (logout móvil) hasta su expiración natural.
    - Clasificar fallas con TokenErrorKind (enum cerrado, sin strings mágicos).

Colaboradores:
    - PyJWT
    - identity.token_blacklist.TokenBlacklist
    - user_lookup (repositorio de usuarios, inyectado)

Decisiones de diseño:
    - Los claims NUNCA reemplazan a la DB: rol y estado se releen en cada request.
    - Secreto vacío => MISCONFIGURED (500), no un 401 engañoso.
    - No loguear tokens; solo el tipo de falla.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable
from uuid import UUID

import jwt

from ..crosscutting.logger import logger
from .token_blacklist import TokenBlacklist
from .users import User

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_ID: str = "id"
CLAIM_USERNAME: str = "username"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"

_REQUIRED_CLAIMS = [CLAIM_ID, CLAIM_USERNAME, CLAIM_ROLE, CLAIM_EXP]


class TokenErrorKind(str, Enum):
    INVALID = "INVALID"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"
    USER_INACTIVE = "USER_INACTIVE"
    MISCONFIGURED = "MISCONFIGURED"


TOKEN_ERROR_MESSAGES: dict[TokenErrorKind, str] = {
    TokenErrorKind.INVALID: "Invalid token",
    TokenErrorKind.EXPIRED: "Token expired",
    TokenErrorKind.REVOKED: "Token revoked",
    # R: mismo mensaje que INVALID (no revelamos estado de la cuenta).
    TokenErrorKind.USER_INACTIVE: "Invalid token",
    TokenErrorKind.MISCONFIGURED: "Token authentication is not configured",
}


class TokenVerificationError(Exception):
    def __init__(self, kind: TokenErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or TOKEN_ERROR_MESSAGES[kind]
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_at: datetime


UserLookup = Callable[[UUID], "User | None"]


class JwtService:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      JwtService

    Responsabilidades:
      - issue(user) -> IssuedToken
      - verify(token) -> User (fresco desde DB)
      - revoke(token)

    Colaboradores:
      - TokenBlacklist
      - UserLookup
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        *,
        secret: str,
        expires_in_minutes: int,
        blacklist: TokenBlacklist,
        user_lookup: UserLookup,
    ) -> None:
        self._secret = (secret or "").strip()
        self._ttl = timedelta(minutes=int(expires_in_minutes))
        self._blacklist = blacklist
        self._user_lookup = user_lookup

    def _require_secret(self) -> str:
        if not self._secret:
            logger.error("JWT_SECRET no configurado")
            raise TokenVerificationError(TokenErrorKind.MISCONFIGURED)
        return self._secret

    # ------------------------------------------------------------------
    # Emisión
    # ------------------------------------------------------------------
    def issue(self, user: User, *, now: datetime | None = None) -> IssuedToken:
        secret = self._require_secret()
        now = now or datetime.now(timezone.utc)
        expires_at = now + self._ttl

        payload: dict[str, Any] = {
            CLAIM_ID: str(user.id),
            CLAIM_USERNAME: user.username,
            CLAIM_ROLE: user.role.value,
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_EXP: int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)
        return IssuedToken(token=token, expires_at=expires_at)

    # ------------------------------------------------------------------
    # Verificación
    # ------------------------------------------------------------------
    def decode(self, token: str, *, verify_exp: bool = True) -> dict[str, Any]:
        secret = self._require_secret()
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": _REQUIRED_CLAIMS, "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenVerificationError(TokenErrorKind.EXPIRED) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(TokenErrorKind.INVALID) from exc

    def verify(self, token: str) -> User:
        """Valida el token y devuelve el usuario vigente (rol/estado desde DB)."""
        if self._blacklist.is_revoked(token):
            logger.warning("JWT revocado presentado")
            raise TokenVerificationError(TokenErrorKind.REVOKED)

        payload = self.decode(token)

        try:
            user_id = UUID(str(payload[CLAIM_ID]))
        except ValueError as exc:
            raise TokenVerificationError(TokenErrorKind.INVALID) from exc

        user = self._user_lookup(user_id)
        if user is None or not user.is_active:
            logger.warning(
                "JWT de usuario inexistente o inactivo",
                extra={"user_id": str(user_id)},
            )
            raise TokenVerificationError(TokenErrorKind.USER_INACTIVE)

        return user

    # ------------------------------------------------------------------
    # Revocación
    # ------------------------------------------------------------------
    def revoke(self, token: str) -> bool:
        """
        Revoca el token hasta su `exp`.

        - Firma/formato inválidos => TokenVerificationError(INVALID).
        - Token ya expirado o ya revocado => no-op (False).
        """
        payload = self.decode(token, verify_exp=False)
        if self._blacklist.is_revoked(token):
            return False
        expires_at = datetime.fromtimestamp(int(payload[CLAIM_EXP]), tz=timezone.utc)
        return self._blacklist.revoke(token, expires_at)
