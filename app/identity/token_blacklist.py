"""
===============================================================================
TARJETA CRC — identity/token_blacklist.py
===============================================================================

Módulo:
    Lista de revocación de JWT (logout móvil)

Responsabilidades:
    - Registrar tokens revocados hasta su expiración natural.
    - Responder si un token está revocado.

Colaboradores:
    - domain.services.TokenStore (memoria o Redis, inyectado)
    - identity.jwt_tokens.JwtService

Notas:
    - Se guarda el SHA-256 del token, nunca el token en claro.
    - TTL = vida restante del token: la entrada desaparece cuando el token
      ya no podría validar de todos modos (sin crecimiento ilimitado).
===============================================================================
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone

from ..crosscutting.logger import logger
from ..domain.services import TokenStore


class TokenBlacklist:
    KEY_PREFIX = "jwt-revoked:"

    def __init__(self, store: TokenStore) -> None:
        self._store = store

    @classmethod
    def _key(cls, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{cls.KEY_PREFIX}{digest}"

    def revoke(
        self, token: str, expires_at: datetime, *, now: datetime | None = None
    ) -> bool:
        """Revoca el token. Retorna False si ya estaba expirado (no hace falta guardarlo)."""
        now = now or datetime.now(timezone.utc)
        remaining = int((expires_at - now).total_seconds())
        if remaining <= 0:
            return False
        self._store.set(self._key(token), "1", max(1, remaining))
        logger.info("JWT revocado", extra={"ttl_seconds": remaining})
        return True

    def is_revoked(self, token: str) -> bool:
        return self._store.get(self._key(token)) is not None
