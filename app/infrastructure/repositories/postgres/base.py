"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresRepository

Responsibilities:
  - Resolver el pool (inyectado para tests o global por factory).
  - Ejecutar SQL parametrizado con manejo de errores consistente:
    logging estructurado + DatabaseError con el error original encadenado.
  - UNIQUE violado => UniqueViolationError (el caso de uso decide el 409).

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.get_pool
  - crosscutting.exceptions.DatabaseError

Constraints:
  - Ningún helper interpola input de usuario; solo fragmentos armados por
    el propio repositorio.
============================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, UniqueViolationError
from ....crosscutting.logger import logger


class PostgresRepository:
    """R: Base con helpers de ejecución compartidos por los repos Postgres."""

    def __init__(self, pool: Optional[ConnectionPool] = None):
        # R: Pool inyectable para tests; en producción se obtiene por factory global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    def _run(
        self,
        fetch: Callable[[Any], Any],
        *,
        query: str,
        params: Iterable[object],
        context_msg: str,
        extra: dict,
    ) -> Any:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return fetch(conn.execute(query, tuple(params)))
        except pg_errors.UniqueViolation as exc:
            constraint = exc.diag.constraint_name
            logger.warning(
                context_msg, extra={**extra, "constraint": constraint, "error": str(exc)}
            )
            raise UniqueViolationError(
                f"{context_msg}: {exc}", constraint=constraint, original_error=exc
            ) from exc
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        return self._run(
            lambda cur: cur.fetchone(),
            query=query,
            params=params,
            context_msg=context_msg,
            extra=extra,
        )

    def _fetchall(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> list[tuple]:
        return self._run(
            lambda cur: cur.fetchall(),
            query=query,
            params=params,
            context_msg=context_msg,
            extra=extra,
        )

    def _execute(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> int:
        """Ejecuta un statement sin RETURNING y devuelve rowcount."""
        return self._run(
            lambda cur: cur.rowcount or 0,
            query=query,
            params=params,
            context_msg=context_msg,
            extra=extra,
        )

    @staticmethod
    def _build_set_clause(
        changes: Mapping[str, Any], allowed: frozenset[str]
    ) -> tuple[list[str], list[object]]:
        """SET dinámico a partir de columnas whitelisteadas."""
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Columnas no actualizables: {sorted(unknown)}")

        updates = [f"{column} = %s" for column in changes]
        params: list[object] = [
            value.value if isinstance(value, Enum) else value
            for value in changes.values()
        ]
        return updates, params
