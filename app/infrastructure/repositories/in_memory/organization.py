"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/organization.py
============================================================
Class: InMemoryOrganizationRepository

Responsibilities:
  - Organizaciones en memoria con el mismo contrato que Postgres:
    orden name_en ASC en listados, update parcial con updated_at.

Constraints:
  - Thread-safe (Lock); devuelve copias para evitar aliasing.
  - Una sola COMPANY (igual que uq_organizations_single_company).
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from ....crosscutting.exceptions import UniqueViolationError
from ....crosscutting.pagination import PageParams
from ....domain.entities import Organization, OrganizationType
from .paging import sort_and_slice


class InMemoryOrganizationRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._organizations: Dict[UUID, Organization] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _of_type(self, organization_type: OrganizationType) -> List[Organization]:
        with self._lock:
            return [
                replace(o)
                for o in self._organizations.values()
                if o.type == organization_type
            ]

    def list_organizations(
        self, organization_type: OrganizationType
    ) -> List[Organization]:
        return sorted(self._of_type(organization_type), key=lambda o: o.name_en)

    def list_organizations_page(
        self,
        organization_type: OrganizationType,
        params: PageParams,
        *,
        sort_field: str,
    ) -> tuple[List[Organization], int]:
        return sort_and_slice(
            self._of_type(organization_type),
            params,
            key=lambda o: getattr(o, sort_field),
        )

    def get_organization(self, organization_id: UUID) -> Optional[Organization]:
        with self._lock:
            found = self._organizations.get(organization_id)
            return replace(found) if found else None

    def get_company(self) -> Optional[Organization]:
        companies = self._of_type(OrganizationType.COMPANY)
        return companies[0] if companies else None

    def create_organization(self, organization: Organization) -> Organization:
        now = self._now()
        stored = replace(organization, created_at=now, updated_at=now)
        with self._lock:
            if stored.type == OrganizationType.COMPANY and any(
                o.type == OrganizationType.COMPANY for o in self._organizations.values()
            ):
                raise UniqueViolationError(
                    "duplicate key value: type=COMPANY",
                    constraint="uq_organizations_single_company",
                )
            self._organizations[stored.id] = stored
        return replace(stored)

    def update_organization(
        self, organization_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Organization]:
        with self._lock:
            current = self._organizations.get(organization_id)
            if current is None:
                return None
            updated = replace(current, **dict(changes), updated_at=self._now())
            self._organizations[organization_id] = updated
            return replace(updated)

    def delete_organization(self, organization_id: UUID) -> bool:
        with self._lock:
            return self._organizations.pop(organization_id, None) is not None
