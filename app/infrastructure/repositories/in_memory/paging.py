"""
Helpers de orden/paginado para repositorios in-memory.

Emulan `ORDER BY <campo> <dir> NULLS LAST LIMIT/OFFSET` de los repos Postgres.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

from ....crosscutting.pagination import PageParams

T = TypeVar("T")


def _comparable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def sort_and_slice(
    items: Iterable[T], params: PageParams, *, key: Callable[[T], Any]
) -> Tuple[List[T], int]:
    """Ordena (None siempre al final) y devuelve (página, total)."""
    values = list(items)
    present = [item for item in values if key(item) is not None]
    missing = [item for item in values if key(item) is None]
    present.sort(key=lambda item: _comparable(key(item)), reverse=params.descending)

    ordered = present + missing
    return ordered[params.offset : params.offset + params.limit], len(ordered)


def matches_search(search: str | None, *fields: str | None) -> bool:
    """ILIKE '%search%' sobre cualquiera de los campos."""
    if not search:
        return True
    needle = search.lower()
    return any(field and needle in field.lower() for field in fields)
