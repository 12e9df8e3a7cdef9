"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/session.py
============================================================
Class: PostgresSessionRepository

Responsibilities:
  - Persistir sesiones web (sid -> user_id, expires_at) en `sessions`.
  - Borrar por sid, por usuario (reset de password) y vencidas (purga).

Collaborators:
  - postgres.base.PostgresRepository
  - domain.entities.SessionRecord

Notes:
  - FK users(id) ON DELETE CASCADE: borrar un usuario invalida sus sesiones.
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from ....domain.entities import SessionRecord
from .base import PostgresRepository

_SESSION_COLUMNS = "sid, user_id, expires_at, created_at"


def _row_to_session(row: tuple) -> SessionRecord:
    return SessionRecord(
        sid=row[0], user_id=row[1], expires_at=row[2], created_at=row[3]
    )


class PostgresSessionRepository(PostgresRepository):
    def create_session(
        self, sid: str, user_id: UUID, expires_at: datetime
    ) -> SessionRecord:
        row = self._fetchone(
            query=f"""
                INSERT INTO sessions (sid, user_id, expires_at)
                VALUES (%s, %s, %s)
                RETURNING {_SESSION_COLUMNS}
            """,
            params=(sid, user_id, expires_at),
            context_msg="PostgresSessionRepository: create_session failed",
            extra={"user_id": str(user_id)},
        )
        return _row_to_session(row)

    def get_session(self, sid: str) -> Optional[SessionRecord]:
        row = self._fetchone(
            query=f"SELECT {_SESSION_COLUMNS} FROM sessions WHERE sid = %s",
            params=(sid,),
            context_msg="PostgresSessionRepository: get_session failed",
            extra={},
        )
        return _row_to_session(row) if row else None

    def delete_session(self, sid: str) -> None:
        self._execute(
            query="DELETE FROM sessions WHERE sid = %s",
            params=(sid,),
            context_msg="PostgresSessionRepository: delete_session failed",
            extra={},
        )

    def delete_sessions_for_user(self, user_id: UUID) -> int:
        return self._execute(
            query="DELETE FROM sessions WHERE user_id = %s",
            params=(user_id,),
            context_msg="PostgresSessionRepository: delete_sessions_for_user failed",
            extra={"user_id": str(user_id)},
        )

    def purge_expired_sessions(self, now: datetime) -> int:
        return self._execute(
            query="DELETE FROM sessions WHERE expires_at <= %s",
            params=(now,),
            context_msg="PostgresSessionRepository: purge_expired_sessions failed",
            extra={},
        )
