"""
===============================================================================
MÓDULO: Utilidades de paginación (page / limit / sort)
===============================================================================

Objetivo
--------
Paginación simple y consistente para los listados administrativos:
- Query: page (>=1), limit (1..100), sortBy (whitelist por recurso), sortOrder
- Response: {"data": [...], "pagination": {page, limit, total, totalPages}}

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PageParams + Page[T] + build_page

Responsabilidades:
  - Validar parámetros de paginación
  - Calcular offset y totalPages = ceil(total / limit)
===============================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class PageParams:
    """Parámetros ya validados (los repos solo ven esto, nunca el request)."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = None
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page debe ser >= 1")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit debe estar entre 1 y {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order == SortOrder.DESC


class PaginationInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")


class Page(BaseModel, Generic[T]):
    data: List[T] = Field(description="Items de la página actual")
    pagination: PaginationInfo


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total > 0 else 0


def build_page(items: Sequence[T], total: int, params: PageParams) -> Page[T]:
    return Page(
        data=list(items),
        pagination=PaginationInfo(
            page=params.page,
            limit=params.limit,
            total=total,
            total_pages=total_pages(total, params.limit),
        ),
    )


def resolve_sort(
    sort_by: str | None, allowed: dict[str, str], default: str
) -> str:
    """Traduce sortBy del cliente (camelCase) a un campo permitido; fallback a default."""
    if sort_by and sort_by in allowed:
        return allowed[sort_by]
    return allowed[default]
