"""
===============================================================================
MÓDULO: Rate limiting (Token Bucket global + ventana fija para login)
===============================================================================

Objetivo
--------
Limitar abuso por IP en dos niveles:
- Global: token bucket in-memory (suaviza bursts) aplicado como middleware ASGI.
- Login: N intentos por ventana fija (default 10 / 15 min) contados en el
  TokenStore compartido, para que el límite valga entre workers cuando hay Redis.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - TokenBucket
  - RateLimitMiddleware
  - LoginRateLimiter

Responsabilidades:
  - Decidir allow/deny
  - Emitir 429 con Retry-After (RFC7807)
  - Mantener estado thread-safe

Colaboradores:
  - crosscutting.config
  - crosscutting.error_responses
  - domain.services.TokenStore (contador de login)
===============================================================================
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from ..domain.services import TokenStore
from .error_responses import app_exception_handler, rate_limited
from .logger import logger


@dataclass
class Bucket:
    tokens: float
    stamp: float  # último refill == último acceso


class TokenBucket:
    """
    Token bucket por cliente (`ip:<addr>`), thread-safe.

    Cada cliente arranca con `burst` fichas y recupera `rps` por segundo.
    Los buckets se mantienen en orden LRU: al superar `max_buckets` se
    descarta el más viejo y, cada 256 operaciones, se purgan los que llevan
    más de `ttl_seconds` sin uso.
    """

    def __init__(
        self,
        rps: float,
        burst: int,
        *,
        ttl_seconds: int = 3600,
        max_buckets: int = 10_000,
    ):
        if rps <= 0 or burst <= 0:
            raise ValueError("rps y burst deben ser > 0")
        self.rps = float(rps)
        self.burst = int(burst)
        self.ttl_seconds = int(ttl_seconds)
        self.max_buckets = int(max_buckets)

        self._buckets: "OrderedDict[str, Bucket]" = OrderedDict()
        self._lock = threading.Lock()
        self._ops = 0

    def consume(self, key: str) -> tuple[bool, float]:
        """Gasta una ficha. Devuelve (permitido, segundos hasta la próxima)."""
        with self._lock:
            now = time.monotonic()
            self._ops += 1
            if self._ops % 256 == 0:
                self._purge_idle(now)

            bucket = self._touch(key, now)
            if bucket.tokens < 1:
                return False, (1 - bucket.tokens) / self.rps
            bucket.tokens -= 1
            return True, 0.0

    def _touch(self, key: str, now: float) -> Bucket:
        bucket = self._buckets.pop(key, None)
        if bucket is None:
            if len(self._buckets) >= self.max_buckets:
                self._buckets.popitem(last=False)
            bucket = Bucket(tokens=float(self.burst), stamp=now)
        elif now > bucket.stamp:
            bucket.tokens = min(
                float(self.burst), bucket.tokens + (now - bucket.stamp) * self.rps
            )
            bucket.stamp = now
        self._buckets[key] = bucket
        return bucket

    def _purge_idle(self, now: float) -> None:
        while self._buckets:
            key, bucket = next(iter(self._buckets.items()))
            if now - bucket.stamp <= self.ttl_seconds:
                return
            del self._buckets[key]


_rate_limiter: Optional[TokenBucket] = None
_limiter_lock = threading.Lock()


def get_rate_limiter() -> TokenBucket:
    global _rate_limiter
    with _limiter_lock:
        if _rate_limiter is None:
            from .config import get_settings

            s = get_settings()
            _rate_limiter = TokenBucket(rps=s.rate_limit_rps, burst=s.rate_limit_burst)
        return _rate_limiter


def reset_rate_limiter() -> None:
    global _rate_limiter
    with _limiter_lock:
        _rate_limiter = None


def is_rate_limiting_enabled() -> bool:
    from .config import get_settings

    s = get_settings()
    return s.rate_limit_rps > 0 and s.rate_limit_burst > 0


def get_client_identifier(request) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return f"ip:{forwarded_for.split(',')[0].strip()}"

    client = request.client
    if client:
        return f"ip:{client.host}"

    return "ip:unknown"


class RateLimitMiddleware:
    """
    ASGI middleware de rate limit global.

    - Excluye endpoints típicos de infraestructura y preflight CORS.
    """

    EXCLUDED_PATHS = {"/healthz", "/openapi.json", "/docs", "/redoc"}

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if (
            scope["type"] != "http"
            or not is_rate_limiting_enabled()
            or scope.get("path", "") in self.EXCLUDED_PATHS
            or scope.get("method", "").upper() == "OPTIONS"
        ):
            await self.app(scope, receive, send)
            return

        from starlette.requests import Request

        request = Request(scope, receive)
        client_id = get_client_identifier(request)

        limiter = get_rate_limiter()
        allowed, retry_after = limiter.consume(client_id)

        if not allowed:
            wait = max(1, int(retry_after) + 1)
            logger.warning(
                "rate limit excedido",
                extra={"client_id": client_id, "retry_after": wait},
            )
            exc = rate_limited(wait)
            exc.headers.update(
                {"x-ratelimit-remaining": "0", "x-ratelimit-limit": str(limiter.burst)}
            )
            response = await app_exception_handler(request, exc)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)


# ---------------------------------------------------------------------------
# Login: ventana fija sobre el TokenStore compartido
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int


class LoginRateLimiter:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      LoginRateLimiter

    Responsabilidades:
      - Contar intentos de login por cliente en una ventana fija.
      - Rechazar cuando se supera max_attempts (todos los intentos cuentan).

    Colaboradores:
      - TokenStore.incr / TokenStore.ttl
      - api/auth_routes.py (dependency enforce_login_rate_limit)
    ----------------------------------------------------------------------------
    """

    KEY_PREFIX = "login-attempts:"

    def __init__(
        self, store: TokenStore, *, max_attempts: int, window_seconds: int
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts debe ser > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds debe ser > 0")
        self._store = store
        self.max_attempts = int(max_attempts)
        self.window_seconds = int(window_seconds)

    def hit(self, client_id: str) -> RateLimitDecision:
        key = f"{self.KEY_PREFIX}{client_id}"
        count = self._store.incr(key, self.window_seconds)
        if count <= self.max_attempts:
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_attempts - count,
                retry_after_seconds=0,
            )

        ttl = self._store.ttl(key)
        retry_after = ttl if ttl is not None and ttl > 0 else self.window_seconds
        return RateLimitDecision(
            allowed=False, remaining=0, retry_after_seconds=int(retry_after)
        )
