"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias y helpers comunes)
===============================================================================

Responsabilidades:
  - Centralizar helpers que se repiten en routers:
      * parseo de query de paginación (page/limit/sortBy/sortOrder)

Patrones aplicados:
  - DRY + Single Responsibility: helpers chicos, reutilizables.
  - Fail-fast: límites de página validados por FastAPI (400 RFC7807).

Colaboradores:
  - crosscutting.pagination (PageParams, SortOrder, límites)
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Query

from app.crosscutting.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PageParams,
    SortOrder,
)


def page_params(default_order: SortOrder = SortOrder.DESC) -> Callable[..., PageParams]:
    """
    Dependency factory de paginación.

    Usuarios ordenan por defecto desc (más nuevos primero); partners y
    contactos asc (alfabético).
    """

    def dependency(
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        sort_by: str | None = Query(None, alias="sortBy", max_length=64),
        sort_order: SortOrder = Query(default_order, alias="sortOrder"),
    ) -> PageParams:
        return PageParams(
            page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
        )

    return dependency


__all__ = ["page_params"]
