"""
===============================================================================
TARJETA CRC — identity/sessions.py
===============================================================================

Módulo:
    Sesiones server-side (cookie web)

Responsabilidades:
    - Crear sesión: sid aleatorio (CSPRNG) -> user_id, con expiración (24h).
    - Resolver sesión -> User vigente; sesiones vencidas, usuarios borrados o
      inactivos resuelven como anónimo (None) y la sesión se destruye.
    - Destruir sesiones (logout / reset de password por admin).

Colaboradores:
    - domain.repositories.SessionRepository (tabla `sessions`)
    - user_lookup (repositorio de usuarios, inyectado)

Notas:
    - La cookie solo transporta el sid; el estado vive en la DB.
    - resolve() nunca lanza por sesión inválida: el request sigue como anónimo.
===============================================================================
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import UUID

from ..crosscutting.logger import logger
from ..domain.entities import SessionRecord
from ..domain.repositories import SessionRepository
from .users import User

SESSION_ID_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        user_lookup: Callable[[UUID], User | None],
        ttl_hours: int = 24,
    ) -> None:
        self._sessions = session_repository
        self._user_lookup = user_lookup
        self._ttl = timedelta(hours=int(ttl_hours))

    @property
    def max_age_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def start(self, user: User, *, now: datetime | None = None) -> SessionRecord:
        now = now or _utcnow()
        sid = secrets.token_urlsafe(SESSION_ID_BYTES)
        return self._sessions.create_session(sid, user.id, now + self._ttl)

    def end(self, sid: str | None) -> None:
        if sid:
            self._sessions.delete_session(sid)

    def end_all_for_user(self, user_id: UUID) -> int:
        return self._sessions.delete_sessions_for_user(user_id)

    def resolve(self, sid: str | None, *, now: datetime | None = None) -> User | None:
        if not sid:
            return None

        record = self._sessions.get_session(sid)
        if record is None:
            return None

        if record.is_expired(now or _utcnow()):
            self._sessions.delete_session(sid)
            return None

        user = self._user_lookup(record.user_id)
        if user is None or not user.is_active:
            logger.info(
                "Sesión descartada: usuario inexistente o inactivo",
                extra={"user_id": str(record.user_id)},
            )
            self._sessions.delete_session(sid)
            return None

        return user

    def purge_expired(self, *, now: datetime | None = None) -> int:
        return self._sessions.purge_expired_sessions(now or _utcnow())
