"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message “humana” (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  LogisticsError + subclases

Responsabilidades:
  - Estandarizar errores de infraestructura que luego se mapean a HTTP
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - infrastructure/repositories/postgres/* (DatabaseError)
  - infrastructure/services/notifications.py (NotificationError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class LogisticsError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      LogisticsError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "LOGISTICS_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class DatabaseError(LogisticsError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class UniqueViolationError(DatabaseError):
    """Violación de constraint UNIQUE (username, única COMPANY, contacto por usuario)."""

    error_code: str = "UNIQUE_VIOLATION"

    def __init__(
        self,
        message: str,
        *,
        constraint: str | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.constraint = constraint


class NotificationError(LogisticsError):
    """Errores del proveedor de notificaciones (no configurado / HTTP / red)."""

    error_code: str = "NOTIFICATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        not_configured: bool = False,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.not_configured = not_configured


class ConfigurationError(LogisticsError):
    """Configuración faltante o inválida detectada en runtime (ej: JWT_SECRET vacío)."""

    error_code: str = "CONFIGURATION_ERROR"
