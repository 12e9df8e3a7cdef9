"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/organization.py
============================================================
Class: PostgresOrganizationRepository

Responsibilities:
  - CRUD de `organizations` (la empresa propia COMPANY + PARTNERs).
  - Listado completo por tipo (name_en ASC) y paginado con orden whitelisteado.
  - Update parcial por columnas permitidas (updated_at siempre se refresca).

Collaborators:
  - postgres.base.PostgresRepository
  - domain.entities.Organization / OrganizationType

Constraints:
  - "Una sola COMPANY" es regla de negocio del use case; la DB la respalda
    con un índice único parcial (uq_organizations_single_company).
============================================================
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import UUID

from ....crosscutting.pagination import PageParams
from ....domain.entities import Organization, OrganizationType
from .base import PostgresRepository

ORGANIZATION_COLUMNS = (
    "id, name_en, name_ar, type, tax_id, registration_number, address, city, "
    "country, phone, email, is_active, notes, created_at, updated_at"
)
ORGANIZATION_COLUMN_COUNT = 15

_SORTABLE_COLUMNS = frozenset({"name_en", "name_ar", "city", "country", "created_at"})

_UPDATABLE_COLUMNS = frozenset(
    {
        "name_en",
        "name_ar",
        "tax_id",
        "registration_number",
        "address",
        "city",
        "country",
        "phone",
        "email",
        "is_active",
        "notes",
    }
)


def row_to_organization(row: tuple) -> Organization:
    return Organization(
        id=row[0],
        name_en=row[1],
        name_ar=row[2],
        type=OrganizationType(row[3]),
        tax_id=row[4],
        registration_number=row[5],
        address=row[6],
        city=row[7],
        country=row[8],
        phone=row[9],
        email=row[10],
        is_active=row[11],
        notes=row[12],
        created_at=row[13],
        updated_at=row[14],
    )


class PostgresOrganizationRepository(PostgresRepository):
    # =========================================================
    # Lectura
    # =========================================================
    def list_organizations(
        self, organization_type: OrganizationType
    ) -> list[Organization]:
        rows = self._fetchall(
            query=f"""
                SELECT {ORGANIZATION_COLUMNS}
                FROM organizations
                WHERE type = %s
                ORDER BY name_en ASC, id ASC
            """,
            params=(organization_type.value,),
            context_msg="PostgresOrganizationRepository: list_organizations failed",
            extra={"type": organization_type.value},
        )
        return [row_to_organization(r) for r in rows]

    def list_organizations_page(
        self,
        organization_type: OrganizationType,
        params: PageParams,
        *,
        sort_field: str,
    ) -> tuple[list[Organization], int]:
        if sort_field not in _SORTABLE_COLUMNS:
            raise ValueError(f"sort_field no soportado: {sort_field}")

        direction = "DESC" if params.descending else "ASC"
        count_row = self._fetchone(
            query="SELECT COUNT(*) FROM organizations WHERE type = %s",
            params=(organization_type.value,),
            context_msg="PostgresOrganizationRepository: count failed",
            extra={"type": organization_type.value},
        )
        rows = self._fetchall(
            query=f"""
                SELECT {ORGANIZATION_COLUMNS}
                FROM organizations
                WHERE type = %s
                ORDER BY {sort_field} {direction} NULLS LAST, id ASC
                LIMIT %s OFFSET %s
            """,
            params=(organization_type.value, params.limit, params.offset),
            context_msg="PostgresOrganizationRepository: list_organizations_page failed",
            extra={"type": organization_type.value, "page": params.page},
        )
        total = int(count_row[0]) if count_row else 0
        return [row_to_organization(r) for r in rows], total

    def get_organization(self, organization_id: UUID) -> Optional[Organization]:
        row = self._fetchone(
            query=f"SELECT {ORGANIZATION_COLUMNS} FROM organizations WHERE id = %s",
            params=(organization_id,),
            context_msg="PostgresOrganizationRepository: get_organization failed",
            extra={"organization_id": str(organization_id)},
        )
        return row_to_organization(row) if row else None

    def get_company(self) -> Optional[Organization]:
        row = self._fetchone(
            query=f"""
                SELECT {ORGANIZATION_COLUMNS}
                FROM organizations
                WHERE type = %s
                ORDER BY created_at ASC
                LIMIT 1
            """,
            params=(OrganizationType.COMPANY.value,),
            context_msg="PostgresOrganizationRepository: get_company failed",
            extra={},
        )
        return row_to_organization(row) if row else None

    # =========================================================
    # Escritura
    # =========================================================
    def create_organization(self, organization: Organization) -> Organization:
        row = self._fetchone(
            query=f"""
                INSERT INTO organizations (
                    id, name_en, name_ar, type, tax_id, registration_number,
                    address, city, country, phone, email, is_active, notes
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {ORGANIZATION_COLUMNS}
            """,
            params=(
                organization.id,
                organization.name_en,
                organization.name_ar,
                organization.type.value,
                organization.tax_id,
                organization.registration_number,
                organization.address,
                organization.city,
                organization.country,
                organization.phone,
                organization.email,
                organization.is_active,
                organization.notes,
            ),
            context_msg="PostgresOrganizationRepository: create_organization failed",
            extra={
                "organization_id": str(organization.id),
                "type": organization.type.value,
            },
        )
        return row_to_organization(row)

    def update_organization(
        self, organization_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Organization]:
        if not changes:
            return self.get_organization(organization_id)

        updates, params = self._build_set_clause(changes, _UPDATABLE_COLUMNS)
        updates.append("updated_at = now()")
        params.append(organization_id)

        row = self._fetchone(
            query=f"""
                UPDATE organizations
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {ORGANIZATION_COLUMNS}
            """,
            params=params,
            context_msg="PostgresOrganizationRepository: update_organization failed",
            extra={"organization_id": str(organization_id), "fields": sorted(changes)},
        )
        return row_to_organization(row) if row else None

    def delete_organization(self, organization_id: UUID) -> bool:
        deleted = self._execute(
            query="DELETE FROM organizations WHERE id = %s",
            params=(organization_id,),
            context_msg="PostgresOrganizationRepository: delete_organization failed",
            extra={"organization_id": str(organization_id)},
        )
        return deleted > 0
