"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/contact.py
============================================================
Class: PostgresContactRepository

Responsibilities:
  - CRUD de `contacts` (personas de contacto de organizaciones).
  - Listado paginado con la organización embebida (LEFT JOIN) y filtros
    por tipo de organización, tipo de contacto y búsqueda en ambos nombres.
  - Búsqueda por user_id (un usuario -> a lo sumo un contacto).

Collaborators:
  - postgres.base.PostgresRepository
  - postgres.organization (columnas + mapping de organizaciones)
  - domain.entities.Contact / ContactWithOrganization
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from ....crosscutting.pagination import PageParams
from ....domain.entities import (
    Contact,
    ContactType,
    ContactWithOrganization,
    OrganizationType,
)
from .base import PostgresRepository
from .organization import (
    ORGANIZATION_COLUMN_COUNT,
    ORGANIZATION_COLUMNS,
    row_to_organization,
)

_CONTACT_COLUMNS = (
    "id, organization_id, user_id, name_en, name_ar, contact_type, mobile, "
    "email, nationality, is_active, notes, created_at, updated_at"
)
_CONTACT_COLUMN_COUNT = 13


def _prefixed(columns: str, alias: str) -> str:
    return ", ".join(f"{alias}.{c.strip()}" for c in columns.split(","))


_JOINED_COLUMNS = (
    f"{_prefixed(_CONTACT_COLUMNS, 'c')}, {_prefixed(ORGANIZATION_COLUMNS, 'o')}"
)

_SORTABLE_COLUMNS = frozenset(
    {"name_en", "name_ar", "contact_type", "mobile", "created_at"}
)

_UPDATABLE_COLUMNS = frozenset(
    {
        "organization_id",
        "user_id",
        "name_en",
        "name_ar",
        "contact_type",
        "mobile",
        "email",
        "nationality",
        "is_active",
        "notes",
    }
)


def _row_to_contact(row: tuple) -> Contact:
    return Contact(
        id=row[0],
        organization_id=row[1],
        user_id=row[2],
        name_en=row[3],
        name_ar=row[4],
        contact_type=ContactType(row[5]),
        mobile=row[6],
        email=row[7],
        nationality=row[8],
        is_active=row[9],
        notes=row[10],
        created_at=row[11],
        updated_at=row[12],
    )


def _row_to_contact_with_organization(row: tuple) -> ContactWithOrganization:
    contact = _row_to_contact(row[:_CONTACT_COLUMN_COUNT])
    org_row = row[_CONTACT_COLUMN_COUNT : _CONTACT_COLUMN_COUNT + ORGANIZATION_COLUMN_COUNT]
    # R: LEFT JOIN sin match => todas las columnas de o.* en NULL.
    organization = row_to_organization(org_row) if org_row[0] is not None else None
    return ContactWithOrganization(contact=contact, organization=organization)


class PostgresContactRepository(PostgresRepository):
    def list_contacts_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        organization_type: OrganizationType | None = None,
        contact_type: ContactType | None = None,
        search: str | None = None,
    ) -> tuple[list[ContactWithOrganization], int]:
        if sort_field not in _SORTABLE_COLUMNS:
            raise ValueError(f"sort_field no soportado: {sort_field}")

        conditions: list[str] = []
        where_params: list[object] = []

        if organization_type is not None:
            conditions.append("o.type = %s")
            where_params.append(organization_type.value)

        if contact_type is not None:
            conditions.append("c.contact_type = %s")
            where_params.append(contact_type.value)

        if search:
            conditions.append("(c.name_en ILIKE %s OR c.name_ar ILIKE %s)")
            pattern = f"%{search}%"
            where_params.extend([pattern, pattern])

        where_sql = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if params.descending else "ASC"
        from_sql = "FROM contacts c LEFT JOIN organizations o ON o.id = c.organization_id"

        count_row = self._fetchone(
            query=f"SELECT COUNT(*) {from_sql} {where_sql}",
            params=where_params,
            context_msg="PostgresContactRepository: count failed",
            extra={},
        )
        rows = self._fetchall(
            query=f"""
                SELECT {_JOINED_COLUMNS}
                {from_sql}
                {where_sql}
                ORDER BY c.{sort_field} {direction} NULLS LAST, c.id ASC
                LIMIT %s OFFSET %s
            """,
            params=[*where_params, params.limit, params.offset],
            context_msg="PostgresContactRepository: list_contacts_page failed",
            extra={"page": params.page, "limit": params.limit},
        )
        total = int(count_row[0]) if count_row else 0
        return [_row_to_contact_with_organization(r) for r in rows], total

    def get_contact(self, contact_id: UUID) -> Optional[ContactWithOrganization]:
        row = self._fetchone(
            query=f"""
                SELECT {_JOINED_COLUMNS}
                FROM contacts c
                LEFT JOIN organizations o ON o.id = c.organization_id
                WHERE c.id = %s
            """,
            params=(contact_id,),
            context_msg="PostgresContactRepository: get_contact failed",
            extra={"contact_id": str(contact_id)},
        )
        return _row_to_contact_with_organization(row) if row else None

    def get_contact_by_user_id(self, user_id: UUID) -> Optional[Contact]:
        row = self._fetchone(
            query=f"SELECT {_CONTACT_COLUMNS} FROM contacts WHERE user_id = %s LIMIT 1",
            params=(user_id,),
            context_msg="PostgresContactRepository: get_contact_by_user_id failed",
            extra={"user_id": str(user_id)},
        )
        return _row_to_contact(row) if row else None

    def create_contact(self, contact: Contact) -> Contact:
        row = self._fetchone(
            query=f"""
                INSERT INTO contacts (
                    id, organization_id, user_id, name_en, name_ar, contact_type,
                    mobile, email, nationality, is_active, notes
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_CONTACT_COLUMNS}
            """,
            params=(
                contact.id,
                contact.organization_id,
                contact.user_id,
                contact.name_en,
                contact.name_ar,
                contact.contact_type.value,
                contact.mobile,
                contact.email,
                contact.nationality,
                contact.is_active,
                contact.notes,
            ),
            context_msg="PostgresContactRepository: create_contact failed",
            extra={"contact_id": str(contact.id)},
        )
        return _row_to_contact(row)

    def update_contact(
        self, contact_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Contact]:
        if not changes:
            found = self.get_contact(contact_id)
            return found.contact if found else None

        updates, params = self._build_set_clause(changes, _UPDATABLE_COLUMNS)
        updates.append("updated_at = now()")
        params.append(contact_id)

        row = self._fetchone(
            query=f"""
                UPDATE contacts
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_CONTACT_COLUMNS}
            """,
            params=params,
            context_msg="PostgresContactRepository: update_contact failed",
            extra={"contact_id": str(contact_id), "fields": sorted(changes)},
        )
        return _row_to_contact(row) if row else None
