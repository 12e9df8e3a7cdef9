"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/__init__.py
===============================================================================

Name:
    Routers Package (HTTP)

Responsibilities:
    - Exponer routers segmentados por contexto para ser incluidos por el
      router principal.

Collaborators:
    - routers.users / notifications / partners / contacts / driver

Notas:
    - Este archivo NO define endpoints. Solo re-exporta routers.
===============================================================================
"""

from .contacts import router as contacts_router
from .driver import router as driver_router
from .notifications import router as notifications_router
from .partners import router as partners_router
from .users import router as users_router

__all__ = [
    "contacts_router",
    "driver_router",
    "notifications_router",
    "partners_router",
    "users_router",
]
