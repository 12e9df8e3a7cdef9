"""
============================================================
TARJETA CRC — infrastructure/token_store.py
============================================================
Module: Shared Token Store (Backends + Factory)

Responsibilities:
  - Persist short-lived keys with native expiry:
      - revoked JWT digests (blacklist)
      - login attempt counters (rate limiting)
  - Select backend:
      - Redis when REDIS_URL is configured and answers PING
      - In-memory otherwise (single process only)
  - Evict expired entries so the store never grows without bound.

Collaborators:
  - redis-py (optional backend).
  - threading.Lock for the in-memory backend.
  - crosscutting.config.Settings (backend selection).

Policy / Design Notes:
  - Expiry semantics are identical across backends: an expired key is missing.
  - In-memory: expiry timestamp per key + periodic sweep + max_entries cap
    (oldest entry evicted first).
  - Redis: SETEX / EXPIRE / INCR under a namespace prefix.
  - In-memory state does not survive restarts nor span workers; use Redis when
    running more than one process.
============================================================
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger


class TokenStoreBackend(ABC):
    """Minimal contract shared by all backends (matches domain.services.TokenStore)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def expire(self, key: str, ttl_seconds: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def incr(self, key: str, ttl_seconds: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def ttl(self, key: str) -> Optional[int]:
        raise NotImplementedError


def _positive_ttl(ttl_seconds: int) -> int:
    ttl = int(ttl_seconds)
    if ttl <= 0:
        raise ValueError("ttl_seconds must be > 0")
    return ttl


# ============================================================
# In-memory backend (TTL + bounded size)
# ============================================================
@dataclass(slots=True)
class _Entry:
    value: str
    expires_at: float


class InMemoryTokenStore(TokenStoreBackend):
    """
    Thread-safe in-memory store.

    Nota:
      - Suficiente para dev/tests o un único proceso.
      - `clock` es inyectable para tests deterministas.
    """

    def __init__(
        self,
        *,
        max_entries: int = 100_000,
        sweep_every: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self._max_entries = int(max_entries)
        self._sweep_every = max(1, int(sweep_every))
        self._clock = clock

        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = Lock()
        self._ops = 0

    # --- internos (llamar con lock tomado) ---
    def _live_entry(self, key: str, now: float) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= now:
            self._entries.pop(key, None)
            return None
        return entry

    def _tick(self, now: float) -> None:
        self._ops += 1
        if self._ops % self._sweep_every == 0:
            self._sweep(now)

    def _sweep(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            self._entries.pop(k, None)

    def _put(self, key: str, entry: _Entry) -> None:
        if key in self._entries:
            self._entries[key] = entry
            self._entries.move_to_end(key, last=True)
            return
        if len(self._entries) >= self._max_entries:
            self._sweep(self._clock())
        if len(self._entries) >= self._max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = entry

    # --- API ---
    def get(self, key: str) -> Optional[str]:
        with self._lock:
            now = self._clock()
            self._tick(now)
            entry = self._live_entry(key, now)
            return entry.value if entry else None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ttl = _positive_ttl(ttl_seconds)
        with self._lock:
            now = self._clock()
            self._tick(now)
            self._put(key, _Entry(value=value, expires_at=now + ttl))

    def expire(self, key: str, ttl_seconds: int) -> bool:
        ttl = _positive_ttl(ttl_seconds)
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                return False
            entry.expires_at = now + ttl
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def incr(self, key: str, ttl_seconds: int) -> int:
        ttl = _positive_ttl(ttl_seconds)
        with self._lock:
            now = self._clock()
            self._tick(now)
            entry = self._live_entry(key, now)
            if entry is None:
                self._put(key, _Entry(value="1", expires_at=now + ttl))
                return 1
            count = int(entry.value) + 1
            entry.value = str(count)
            return count

    def ttl(self, key: str) -> Optional[int]:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                return None
            return max(1, int(entry.expires_at - now))

    def __len__(self) -> int:
        with self._lock:
            self._sweep(self._clock())
            return len(self._entries)


# ============================================================
# Redis backend (TTL nativo + namespace)
# ============================================================
class RedisTokenStore(TokenStoreBackend):
    """
    Store Redis compartido entre workers y persistente a reinicios.

    A diferencia de un caché, acá los errores de Redis se propagan: perder un
    registro de revocación no es aceptable en silencio.
    """

    KEY_PREFIX = "logistics:auth:"

    def __init__(self, *, redis_url: str, client=None) -> None:
        if client is None:
            if not redis_url:
                raise ValueError("redis_url is required")
            import redis

            client = redis.from_url(redis_url, decode_responses=True)
        self._client = client

    def _k(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    def ping(self) -> bool:
        return bool(self._client.ping())

    def get(self, key: str) -> Optional[str]:
        return self._client.get(self._k(key))

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.setex(self._k(key), _positive_ttl(ttl_seconds), value)

    def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(self._client.expire(self._k(key), _positive_ttl(ttl_seconds)))

    def delete(self, key: str) -> None:
        self._client.delete(self._k(key))

    def incr(self, key: str, ttl_seconds: int) -> int:
        ttl = _positive_ttl(ttl_seconds)
        namespaced = self._k(key)
        count = int(self._client.incr(namespaced))
        # R: la ventana arranca con el primer incremento (o si quedó sin TTL).
        if count == 1 or self._client.ttl(namespaced) == -1:
            self._client.expire(namespaced, ttl)
        return count

    def ttl(self, key: str) -> Optional[int]:
        remaining = self._client.ttl(self._k(key))
        # R: -2 = no existe, -1 = sin expiración.
        if remaining is None or remaining == -2:
            return None
        return int(remaining) if remaining > 0 else None


# ============================================================
# Factory
# ============================================================
def build_token_store(settings: Settings) -> TokenStoreBackend:
    """
    Selección:
      - TOKEN_STORE_BACKEND=memory => in-memory
      - TOKEN_STORE_BACKEND=redis|auto => Redis si REDIS_URL responde, si no in-memory
    """
    backend = settings.token_store_backend
    redis_url = (settings.redis_url or "").strip()

    if backend != "memory" and redis_url:
        try:
            store = RedisTokenStore(redis_url=redis_url)
            store.ping()
            logger.info("Token store: usando Redis")
            return store
        except Exception as exc:
            logger.warning(
                "Token store: Redis no disponible; usando memoria",
                extra={"error": str(exc), "forced": backend == "redis"},
            )
    elif backend == "redis":
        logger.warning("Token store: TOKEN_STORE_BACKEND=redis sin REDIS_URL; usando memoria")

    return InMemoryTokenStore(max_entries=settings.token_store_max_entries)
