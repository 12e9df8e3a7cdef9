"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/contact.py
============================================================
Class: InMemoryContactRepository

Responsibilities:
  - Contactos en memoria; la organización se "joinea" leyendo el repo de
    organizaciones inyectado (equivalente al LEFT JOIN de Postgres).
  - Un contacto cuya organización ya no existe se trata como borrado
    (mismo efecto que ON DELETE CASCADE).
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
from ....domain.entities import (
    Contact,
    ContactType,
    ContactWithOrganization,
    OrganizationType,
)
from ....domain.repositories import OrganizationRepository
from .paging import matches_search, sort_and_slice


class InMemoryContactRepository:
    def __init__(self, organizations: OrganizationRepository) -> None:
        self._lock = Lock()
        self._contacts: Dict[UUID, Contact] = {}
        self._organizations = organizations

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _with_organization(self, contact: Contact) -> ContactWithOrganization:
        return ContactWithOrganization(
            contact=replace(contact),
            organization=self._organizations.get_organization(contact.organization_id),
        )

    def list_contacts_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        organization_type: OrganizationType | None = None,
        contact_type: ContactType | None = None,
        search: str | None = None,
    ) -> tuple[List[ContactWithOrganization], int]:
        with self._lock:
            contacts = list(self._contacts.values())

        joined = [self._with_organization(c) for c in contacts]
        joined = [item for item in joined if item.organization is not None]
        filtered = [
            item
            for item in joined
            if (
                organization_type is None
                or (
                    item.organization is not None
                    and item.organization.type == organization_type
                )
            )
            and (contact_type is None or item.contact.contact_type == contact_type)
            and matches_search(search, item.contact.name_en, item.contact.name_ar)
        ]
        return sort_and_slice(
            filtered, params, key=lambda item: getattr(item.contact, sort_field)
        )

    def get_contact(self, contact_id: UUID) -> Optional[ContactWithOrganization]:
        with self._lock:
            found = self._contacts.get(contact_id)
        if found is None:
            return None
        joined = self._with_organization(found)
        return joined if joined.organization is not None else None

    def get_contact_by_user_id(self, user_id: UUID) -> Optional[Contact]:
        with self._lock:
            linked = [c for c in self._contacts.values() if c.user_id == user_id]
        for contact in linked:
            # R: emula ON DELETE CASCADE (contactos de organizaciones borradas)
            if self._organizations.get_organization(contact.organization_id):
                return replace(contact)
        return None

    def _assert_user_free(self, contact: Contact) -> None:
        """Llamar con el lock tomado; equivale a uq_contacts_user_id."""
        if contact.user_id is None:
            return
        for other in self._contacts.values():
            if (
                other.id != contact.id
                and other.user_id == contact.user_id
                and self._organizations.get_organization(other.organization_id)
            ):
                raise UniqueViolationError(
                    f"duplicate key value: user_id={contact.user_id}",
                    constraint="uq_contacts_user_id",
                )

    def create_contact(self, contact: Contact) -> Contact:
        now = self._now()
        stored = replace(contact, created_at=now, updated_at=now)
        with self._lock:
            self._assert_user_free(stored)
            self._contacts[stored.id] = stored
        return replace(stored)

    def update_contact(
        self, contact_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Contact]:
        with self._lock:
            current = self._contacts.get(contact_id)
            if current is None:
                return None
            updated = replace(current, **dict(changes), updated_at=self._now())
            self._assert_user_free(updated)
            self._contacts[contact_id] = updated
            return replace(updated)
