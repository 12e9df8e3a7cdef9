"""
===============================================================================
TARJETA CRC — error_mapping.py (ServiceError -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir ServiceErrorKind de los casos de uso a AppHTTPException.
  - Centralizar el mapeo para evitar duplicación en routers.
  - Mantener la capa de aplicación libre de HTTP.

Reglas:
  - Se decide SOLO por `kind`; el texto del mensaje viaja tal cual como detail.
  - Kind desconocido => 500 (nunca se degrada a 4xx silenciosamente).

Colaboradores:
  - application.usecases.results (ServiceError, ServiceErrorKind)
  - crosscutting.error_responses (factories RFC7807)
===============================================================================
"""

from __future__ import annotations

from typing import Callable, NoReturn

from app.application.usecases.results import ServiceError, ServiceErrorKind
from app.crosscutting.error_responses import (
    AppHTTPException,
    conflict,
    forbidden,
    internal_error,
    not_found,
    rate_limited,
    unauthorized,
    validation_error,
)

# R: única tabla kind -> factory; el status sale del catálogo de ErrorCode.
_FACTORY_BY_KIND: dict[ServiceErrorKind, Callable[[str], AppHTTPException]] = {
    ServiceErrorKind.VALIDATION: validation_error,
    ServiceErrorKind.UNAUTHORIZED: unauthorized,
    ServiceErrorKind.FORBIDDEN: forbidden,
    ServiceErrorKind.NOT_FOUND: not_found,
    ServiceErrorKind.CONFLICT: conflict,
    ServiceErrorKind.RATE_LIMITED: lambda message: rate_limited(detail=message),
    ServiceErrorKind.INTERNAL: internal_error,
}


def to_http_exception(error: ServiceError) -> AppHTTPException:
    """ServiceError -> AppHTTPException (sin lanzar)."""
    factory = _FACTORY_BY_KIND.get(error.kind, internal_error)
    return factory(error.message)


def raise_service_error(error: ServiceError) -> NoReturn:
    raise to_http_exception(error)


__all__ = ["raise_service_error", "to_http_exception"]
