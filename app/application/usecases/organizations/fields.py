"""Normalización compartida de campos editables (organizaciones y contactos)."""

from __future__ import annotations

from typing import Any, Mapping

REQUIRED_NAME_FIELDS = ("name_en", "name_ar")


def clean_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    - Strings con strip.
    - email vacío => None (el cliente lo manda como "" para borrarlo).
    """
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
        if key == "email" and not value:
            value = None
        cleaned[key] = value
    return cleaned


def missing_name(fields: Mapping[str, Any], *, partial: bool) -> str | None:
    """Nombre bilingüe obligatorio (en update solo si viene en el payload)."""
    for name in REQUIRED_NAME_FIELDS:
        if partial and name not in fields:
            continue
        if not fields.get(name):
            return name
    return None
