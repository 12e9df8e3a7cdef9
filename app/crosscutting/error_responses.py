"""
===============================================================================
MÓDULO: Errores HTTP del back-office (RFC 7807 / Problem Details)
===============================================================================

Todas las respuestas de error (panel web, app de conductores, middlewares)
salen como `application/problem+json` con un `code` estable:

    {
      "type": "about:blank/not_found",
      "title": "Not Found",
      "status": 404,
      "detail": "Partner not found",
      "code": "NOT_FOUND",
      "instance": "http://.../api/admin/organizations/partners/...",
      "errors": [{"request_id": "..."}]
    }

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + catálogo de códigos + handler

Responsabilidades:
  - Catálogo ErrorCode -> (status HTTP, mensaje por defecto)
  - Construir el payload RFC7807 (build_problem)
  - Factories de errores que usan rutas, identity y casos de uso
  - Handler FastAPI para AppHTTPException

Colaboradores:
  - crosscutting/middleware.py (413 fuera de FastAPI)
  - api/exception_handlers.py (errores de DB / Novu / no controlados)
  - interfaces/api/http/error_mapping.py (ServiceErrorKind -> factory)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    # 4xx
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "RATE_LIMITED"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOTIFICATION_ERROR = "NOTIFICATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


# R: status HTTP + detail por defecto de cada código.
_CATALOG: dict[ErrorCode, tuple[int, str]] = {
    ErrorCode.VALIDATION_ERROR: (400, "Validation error"),
    ErrorCode.BAD_REQUEST: (400, "Bad request"),
    ErrorCode.UNAUTHORIZED: (401, "Authentication required"),
    ErrorCode.FORBIDDEN: (403, "Insufficient role"),
    ErrorCode.NOT_FOUND: (404, "Resource not found"),
    ErrorCode.CONFLICT: (409, "Conflict with the current state"),
    ErrorCode.PAYLOAD_TOO_LARGE: (413, "Request body too large"),
    ErrorCode.RATE_LIMITED: (429, "Too many requests"),
    ErrorCode.INTERNAL_ERROR: (500, "Internal error"),
    ErrorCode.NOTIFICATION_ERROR: (502, "Notification provider failure"),
    ErrorCode.DATABASE_ERROR: (503, "Database unavailable"),
}


class ErrorDetail(BaseModel):
    """Payload RFC 7807 + `code` estable + `errors[]` opcional."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def build_problem(
    code: ErrorCode,
    detail: str | None = None,
    *,
    status: int | None = None,
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Arma el dict problem+json listo para serializar."""
    default_status, default_detail = _CATALOG[code]
    return ErrorDetail(
        type=f"about:blank/{code.value.lower()}",
        title=code.value.replace("_", " ").title(),
        status=status or default_status,
        detail=detail or default_detail,
        code=code,
        instance=instance,
        errors=errors or None,
    ).model_dump(exclude_none=True)


def _openapi_error(description: str) -> dict[str, Any]:
    return {
        "description": f"{description} (RFC7807)",
        "model": ErrorDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {
                "schema": {"$ref": "#/components/schemas/ErrorDetail"}
            }
        },
    }


OPENAPI_ERROR_RESPONSES = {
    str(status): _openapi_error(code.value.replace("_", " ").title())
    for code, (status, _) in _CATALOG.items()
    if status < 500
}
OPENAPI_ERROR_RESPONSES["default"] = _openapi_error("Error")


class AppHTTPException(HTTPException):
    """
    HTTPException con `code` de catálogo, `errors[]` y headers opcionales
    (Retry-After en 429).
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.errors = errors

    @classmethod
    def of(
        cls,
        code: ErrorCode,
        detail: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> "AppHTTPException":
        status, default_detail = _CATALOG[code]
        return cls(status, code, detail or default_detail, errors, headers)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.VALIDATION_ERROR, detail, errors)


def bad_request(detail: str) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.BAD_REQUEST, detail)


def not_found(detail: str) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.NOT_FOUND, detail)


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.CONFLICT, detail)


def unauthorized(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.FORBIDDEN, detail)


def rate_limited(retry_after: int = 60, detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(
        ErrorCode.RATE_LIMITED,
        detail or f"Too many requests. Retry in {retry_after}s",
        headers={"Retry-After": str(retry_after)},
    )


def payload_too_large(max_size: str) -> AppHTTPException:
    return AppHTTPException.of(
        ErrorCode.PAYLOAD_TOO_LARGE,
        f"Request body too large. Maximum allowed: {max_size}",
    )


def internal_error(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.INTERNAL_ERROR, detail)


def notification_error(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.NOTIFICATION_ERROR, detail)


def database_error(detail: str | None = None) -> AppHTTPException:
    return AppHTTPException.of(ErrorCode.DATABASE_ERROR, detail)


# ---------------------------------------------------------------------------
# Handler FastAPI
# ---------------------------------------------------------------------------
async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """AppHTTPException -> problem+json (agrega request_id a errors[])."""
    request_id = getattr(getattr(request, "state", None), "request_id", None)

    errors = list(exc.errors or [])
    if request_id:
        errors.append({"request_id": request_id})

    return JSONResponse(
        status_code=exc.status_code,
        content=build_problem(
            exc.code,
            str(exc.detail),
            status=exc.status_code,
            instance=str(request.url),
            errors=errors,
        ),
        headers=getattr(exc, "headers", None),
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )
