"""
In-memory VerificationTokenRepository.

consume_token hace check-and-set bajo el lock y marca email_verified del dueño
antes de soltarlo: mismo contrato que la única sentencia UPDATE de Postgres.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional
from uuid import UUID, uuid4

from ....domain.entities import EmailVerificationToken
from ....domain.repositories import UserRepository


class InMemoryVerificationTokenRepository:
    def __init__(self, user_repository: UserRepository) -> None:
        self._lock = Lock()
        self._tokens: Dict[str, EmailVerificationToken] = {}
        self._users = user_repository

    def invalidate_unverified_for_user(self, user_id: UUID, now: datetime) -> int:
        invalidated = 0
        with self._lock:
            for record in self._tokens.values():
                if record.user_id == user_id and record.is_consumable(now):
                    record.expires_at = now
                    invalidated += 1
        return invalidated

    def create_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> EmailVerificationToken:
        record = EmailVerificationToken(
            id=uuid4(),
            user_id=user_id,
            token=token,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._tokens[token] = record
        return replace(record)

    def consume_token(self, token: str, now: datetime) -> Optional[UUID]:
        with self._lock:
            record = self._tokens.get(token)
            if record is None or not record.is_consumable(now):
                return None
            record.verified_at = now
            if self._users.update_user(record.user_id, email_verified=True) is None:
                return None
            return record.user_id

    def count_created_since(self, user_id: UUID, since: datetime) -> int:
        with self._lock:
            return sum(
                1
                for t in self._tokens.values()
                if t.user_id == user_id and t.created_at and t.created_at >= since
            )
