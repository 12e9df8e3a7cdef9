"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios para autenticación (por username / por id).
  - Crear usuarios y actualizar campos administrables (password, rol,
    estado, flags de onboarding, último login).
  - Listados admin: completo (más nuevos primero) y paginado con filtros.
  - Mapear filas crudas -> entidad de dominio `User` validando `UserRole`.

Collaborators:
  - postgres.base.PostgresRepository (pool + helpers de ejecución)
  - identity.users.User / UserRole
  - crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio (unicidad de email la
    decide el use case; la DB la garantiza con uq_users_username).
  - Retorna None cuando no existe el recurso.
  - Orden estable en listados: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.pagination import PageParams
from ....identity.users import User, UserRole
from .base import PostgresRepository

# R: Lista explícita de columnas; contrato estable con migraciones.
_USER_COLUMNS = (
    "id, username, password_hash, full_name, role, is_active, "
    "must_change_password, email_verified, last_login_at, created_at"
)

_USER_ORDER_BY = "created_at DESC, id DESC"

# R: Columnas ordenables (el caller ya tradujo sortBy -> snake_case).
_SORTABLE_COLUMNS = frozenset(
    {"created_at", "username", "full_name", "role", "last_login_at"}
)


def _row_to_user(row: tuple) -> User:
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=row[0],
        username=row[1],
        password_hash=row[2],
        full_name=row[3],
        role=role,
        is_active=row[5],
        must_change_password=row[6],
        email_verified=row[7],
        last_login_at=row[8],
        created_at=row[9],
    )


class PostgresUserRepository(PostgresRepository):
    """R: Implementación PostgreSQL del repositorio de usuarios."""

    # =========================================================
    # Lectura
    # =========================================================
    def get_user_by_username(self, username: str) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE username = %s",
            params=(username,),
            context_msg="PostgresUserRepository: get_user_by_username failed",
            extra={},
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            context_msg="PostgresUserRepository: get_user_by_id failed",
            extra={"user_id": str(user_id)},
        )
        return _row_to_user(row) if row else None

    def list_users(self) -> list[User]:
        rows = self._fetchall(
            query=f"SELECT {_USER_COLUMNS} FROM users ORDER BY {_USER_ORDER_BY}",
            params=(),
            context_msg="PostgresUserRepository: list_users failed",
            extra={},
        )
        return [_row_to_user(r) for r in rows]

    def list_users_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> tuple[list[User], int]:
        if sort_field not in _SORTABLE_COLUMNS:
            raise ValueError(f"sort_field no soportado: {sort_field}")

        conditions: list[str] = []
        where_params: list[object] = []

        if role is not None:
            conditions.append("role = %s")
            where_params.append(role.value)

        if search:
            conditions.append("(username ILIKE %s OR full_name ILIKE %s)")
            pattern = f"%{search}%"
            where_params.extend([pattern, pattern])

        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if params.descending else "ASC"

        count_row = self._fetchone(
            query=f"SELECT COUNT(*) FROM users {where_sql}",
            params=where_params,
            context_msg="PostgresUserRepository: count users failed",
            extra={"role": role.value if role else None},
        )
        rows = self._fetchall(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                {where_sql}
                ORDER BY {sort_field} {direction} NULLS LAST, id {direction}
                LIMIT %s OFFSET %s
            """,
            params=[*where_params, params.limit, params.offset],
            context_msg="PostgresUserRepository: list_users_page failed",
            extra={"page": params.page, "limit": params.limit},
        )
        total = int(count_row[0]) if count_row else 0
        return [_row_to_user(r) for r in rows], total

    def ping(self) -> bool:
        row = self._fetchone(
            query="SELECT 1",
            params=(),
            context_msg="PostgresUserRepository: ping failed",
            extra={},
        )
        return bool(row)

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
        user_id = uuid4()
        row = self._fetchone(
            query=f"""
                INSERT INTO users (
                    id, username, password_hash, full_name, role, is_active,
                    must_change_password, email_verified
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                user_id,
                username,
                password_hash,
                full_name,
                role.value,
                is_active,
                must_change_password,
                email_verified,
            ),
            context_msg="PostgresUserRepository: create_user failed",
            extra={"user_id": str(user_id), "role": role.value},
        )
        if not row:
            raise DatabaseError(
                "PostgresUserRepository: create_user failed (no row returned)"
            )
        return _row_to_user(row)

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
        """
        Update dinámico: solo los campos presentes (None = sin cambio).
        Sin cambios => devuelve el estado actual.
        """
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
        if not changes:
            return self.get_user_by_id(user_id)

        updates, params = self._build_set_clause(changes, frozenset(candidates))
        updates.append("updated_at = now()")
        params.append(user_id)

        row = self._fetchone(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            context_msg="PostgresUserRepository: update_user failed",
            extra={"user_id": str(user_id), "fields": sorted(changes)},
        )
        return _row_to_user(row) if row else None
