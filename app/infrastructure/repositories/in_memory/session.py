"""In-memory SessionRepository (tests / local dev). Thread-safe."""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional
from uuid import UUID

from ....domain.entities import SessionRecord


class InMemorySessionRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: Dict[str, SessionRecord] = {}

    def create_session(
        self, sid: str, user_id: UUID, expires_at: datetime
    ) -> SessionRecord:
        record = SessionRecord(
            sid=sid,
            user_id=user_id,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._sessions[sid] = record
        return record

    def get_session(self, sid: str) -> Optional[SessionRecord]:
        with self._lock:
            return self._sessions.get(sid)

    def delete_session(self, sid: str) -> None:
        with self._lock:
            self._sessions.pop(sid, None)

    def delete_sessions_for_user(self, user_id: UUID) -> int:
        with self._lock:
            doomed = [s for s, r in self._sessions.items() if r.user_id == user_id]
            for sid in doomed:
                del self._sessions[sid]
        return len(doomed)

    def purge_expired_sessions(self, now: datetime) -> int:
        with self._lock:
            doomed = [s for s, r in self._sessions.items() if r.is_expired(now)]
            for sid in doomed:
                del self._sessions[sid]
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
