"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL (singleton por proceso)

Responsabilidades:
  - Inicializar, exponer y cerrar el pool de conexiones.
  - Configurar cada conexión nueva con statement_timeout.
  - Verificar conectividad (health check).

Colaboradores:
  - psycopg_pool.ConnectionPool
  - crosscutting.config.get_settings (timeout)

Principios:
  - Fail-fast (doble init, uso sin init)
  - Encapsulación (pool global único, protegido por lock)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.logger import logger
from .errors import (
    DatabaseConnectionError,
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)

_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def _configure_connection(conn) -> None:
    """Guardrail contra queries colgadas: statement_timeout por conexión."""
    from ...crosscutting.config import get_settings

    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {timeout_ms}")
        conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    """Inicializa el pool (una vez por proceso)."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("Database pool already initialized")

        logger.info(
            "Inicializando pool DB",
            extra={"min_size": min_size, "max_size": max_size},
        )

        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=True,
        )

        logger.info("Pool DB inicializado")
        return _pool


def get_pool() -> ConnectionPool:
    if _pool is None:
        raise PoolNotInitializedError(
            "Database pool not initialized; call init_pool() first"
        )
    return _pool


def is_pool_initialized() -> bool:
    return _pool is not None


def check_connection() -> None:
    """SELECT 1 contra el pool. Lanza DatabaseConnectionError si falla."""
    pool = get_pool()
    try:
        with pool.connection() as conn:
            conn.execute("SELECT 1").fetchone()
    except Exception as exc:
        raise DatabaseConnectionError(f"Database unreachable: {exc}") from exc


def close_pool() -> None:
    """Cierra el pool (idempotente)."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.info("Cerrando pool DB")
            try:
                _pool.close()
            finally:
                _pool = None
            logger.info("Pool DB cerrado")


def reset_pool() -> None:
    """Reset para tests: descarta el singleton sin propagar errores de cierre."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            try:
                _pool.close()
            except Exception as exc:
                logger.warning("reset_pool: close falló", extra={"error": str(exc)})
        _pool = None
