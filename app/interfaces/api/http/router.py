"""
===============================================================================
TARJETA CRC — router.py (Router raíz / Composición)
===============================================================================

Responsabilidades:
  - Definir el APIRouter raíz que se incluye en FastAPI (app.include_router).
  - Centralizar responses RFC7807 para OpenAPI.
  - Componer routers por contexto (admin users / notifications / partners /
    contacts / driver).

Patrones aplicados:
  - Composition over inheritance: router raíz compone sub-routers.
  - Factory: build_router() para testear composición y evitar side-effects al importar.

Colaboradores:
  - crosscutting.error_responses.OPENAPI_ERROR_RESPONSES
  - routers.* (sub-routers por feature)

Notas:
  - Este router se incluye desde app/api/main.py con prefix="/api".
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from ....crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .routers import (
    contacts_router,
    driver_router,
    notifications_router,
    partners_router,
    users_router,
)


def build_router() -> APIRouter:
    """Construye el router raíz de la API (sin prefix; lo pone main.py)."""
    api_router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

    api_router.include_router(driver_router)
    api_router.include_router(users_router)
    api_router.include_router(notifications_router)
    api_router.include_router(partners_router)
    api_router.include_router(contacts_router)

    return api_router


router = build_router()

__all__ = ["router", "build_router"]
