"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Respetar el mismo contrato que PostgresUserRepository: unicidad de
    username, orden created_at DESC, update parcial (None = sin cambio).

Collaborators:
  - identity.users.User / UserRole
  - in_memory.paging

Constraints:
  - Thread-safe (Lock). User es inmutable: updates vía dataclasses.replace.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import UniqueViolationError
from ....crosscutting.pagination import PageParams
from ....identity.users import User, UserRole
from .paging import matches_search, sort_and_slice


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _newest_first(self) -> List[User]:
        # R: dict preserva orden de inserción; invertirlo desempata created_at.
        values = list(self._users.values())[::-1]
        return sorted(
            values,
            key=lambda u: u.created_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
        return None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(self) -> List[User]:
        with self._lock:
            return self._newest_first()

    def list_users_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> tuple[List[User], int]:
        with self._lock:
            users = self._newest_first()

        filtered = [
            u
            for u in users
            if (role is None or u.role == role)
            and matches_search(search, u.username, u.full_name)
        ]
        return sort_and_slice(
            filtered, params, key=lambda u: getattr(u, sort_field)
        )

    def ping(self) -> bool:
        return True

    # =========================================================
    # Escritura
    # =========================================================
    def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        full_name: str,
        role: UserRole,
        is_active: bool = True,
        must_change_password: bool = True,
        email_verified: bool = False,
    ) -> User:
        user = User(
            id=uuid4(),
            username=username,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            is_active=is_active,
            must_change_password=must_change_password,
            email_verified=email_verified,
            created_at=self._now(),
        )
        with self._lock:
            if any(u.username == username for u in self._users.values()):
                raise UniqueViolationError(
                    f"duplicate key value: username={username}",
                    constraint="uq_users_username",
                )
            self._users[user.id] = user
        return user

    def update_user(
        self,
        user_id: UUID,
        *,
        username: str | None = None,
        password_hash: str | None = None,
        full_name: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
        must_change_password: bool | None = None,
        email_verified: bool | None = None,
        last_login_at: datetime | None = None,
    ) -> Optional[User]:
        candidates = {
            "username": username,
            "password_hash": password_hash,
            "full_name": full_name,
            "role": role,
            "is_active": is_active,
            "must_change_password": must_change_password,
            "email_verified": email_verified,
            "last_login_at": last_login_at,
        }
        changes = {k: v for k, v in candidates.items() if v is not None}

        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            if username is not None and any(
                u.username == username and u.id != user_id
                for u in self._users.values()
            ):
                raise UniqueViolationError(
                    f"duplicate key value: username={username}",
                    constraint="uq_users_username",
                )
            updated = replace(current, **changes)
            self._users[user_id] = updated
            return updated
