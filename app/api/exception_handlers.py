"""
===============================================================================
TARJETA CRC — app/api/exception_handlers.py (Errores -> problem+json)
===============================================================================

Responsabilidades:
  - Registrar en FastAPI los handlers de error del back-office.
  - Validación de request (body/query/path) -> 400 VALIDATION_ERROR + errors[].
  - UniqueViolationError -> 409, DatabaseError -> 503, NotificationError -> 502.
  - Otro LogisticsError -> 500.
  - Cualquier otra excepción -> 500 sin filtrar internos en producción.

Colaboradores:
  - crosscutting.error_responses: factories + app_exception_handler
  - crosscutting.exceptions: LogisticsError y derivadas
  - crosscutting.logger
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    app_exception_handler,
    conflict,
    database_error,
    internal_error,
    notification_error,
    validation_error,
)
from ..crosscutting.exceptions import (
    DatabaseError,
    LogisticsError,
    NotificationError,
    UniqueViolationError,
)
from ..crosscutting.logger import logger

VALIDATION_ERROR_DETAIL = "Validation error"

# R: orden = de más específico a más general (isinstance).
_TYPED_ERRORS: list[tuple[type[LogisticsError], Callable[[str], AppHTTPException]]] = [
    (UniqueViolationError, conflict),
    (DatabaseError, database_error),
    (NotificationError, notification_error),
    (LogisticsError, internal_error),
]


def _request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def logistics_error_handler(request: Request, exc: LogisticsError) -> JSONResponse:
    factory = next(f for kind, f in _TYPED_ERRORS if isinstance(exc, kind))
    app_exc = factory(exc.message)
    app_exc.errors = [{"error_id": exc.error_id}]

    logger.error(
        "Error de servicio",
        extra={
            "code": app_exc.code.value,
            "error_id": exc.error_id,
            "error": exc.message,
            "request_id": _request_id(request),
        },
    )
    return await app_exception_handler(request, app_exc)


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """[{field, message, type}] sin el prefijo "body" en el path."""
    return [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await app_exception_handler(
        request, validation_error(VALIDATION_ERROR_DETAIL, _field_errors(exc))
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"request_id": _request_id(request), "error": str(exc)},
    )
    # R: en producción nunca se expone el mensaje original.
    detail = None if get_settings().is_production() else str(exc)
    return await app_exception_handler(request, internal_error(detail))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(LogisticsError, logistics_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
