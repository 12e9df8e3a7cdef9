"""
===============================================================================
USE CASES: Partners (organizaciones tipo PARTNER)
===============================================================================

Business Goal:
    Administrar las organizaciones socias: listado, alta, edición,
    activación/desactivación (soft delete) y borrado definitivo.

Reglas:
    - El tipo siempre es PARTNER (no editable); una COMPANY buscada por id
      acá es NOT_FOUND.
    - Update requiere al menos un campo.
    - Orden por defecto: nameEn ASC.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    ListPartnersUseCase, GetPartnerUseCase, CreatePartnerUseCase,
    UpdatePartnerUseCase, SetPartnerActiveUseCase, DeletePartnerUseCase

Collaborators:
    - OrganizationRepository
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID, uuid4

from ....crosscutting.logger import logger
from ....crosscutting.pagination import PageParams, resolve_sort
from ....domain.entities import Organization, OrganizationType
from ....domain.repositories import OrganizationRepository
from ..results import (
    CommandResult,
    OrganizationListResult,
    OrganizationResult,
    not_found,
    validation,
)
from .fields import clean_fields, missing_name

PARTNER_NOT_FOUND = "Partner not found"

PARTNER_SORT_FIELDS = {
    "nameEn": "name_en",
    "nameAr": "name_ar",
    "city": "city",
    "country": "country",
    "createdAt": "created_at",
}
DEFAULT_PARTNER_SORT = "nameEn"


def _load_partner(
    organizations: OrganizationRepository, partner_id: UUID
) -> Organization | None:
    organization = organizations.get_organization(partner_id)
    if organization is None or organization.type != OrganizationType.PARTNER:
        return None
    return organization


class ListPartnersUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self) -> OrganizationListResult:
        partners = self._organizations.list_organizations(OrganizationType.PARTNER)
        return OrganizationListResult(organizations=partners, total=len(partners))

    def execute_page(self, params: PageParams) -> OrganizationListResult:
        sort_field = resolve_sort(
            params.sort_by, PARTNER_SORT_FIELDS, DEFAULT_PARTNER_SORT
        )
        partners, total = self._organizations.list_organizations_page(
            OrganizationType.PARTNER, params, sort_field=sort_field
        )
        return OrganizationListResult(organizations=partners, total=total)


class GetPartnerUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, partner_id: UUID) -> OrganizationResult:
        partner = _load_partner(self._organizations, partner_id)
        if partner is None:
            return OrganizationResult(error=not_found(PARTNER_NOT_FOUND))
        return OrganizationResult(organization=partner)


class CreatePartnerUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, fields: Mapping[str, Any]) -> OrganizationResult:
        data = clean_fields(fields)
        missing = missing_name(data, partial=False)
        if missing:
            return OrganizationResult(error=validation(f"{missing} is required"))

        data.pop("is_active", None)
        data.pop("type", None)
        partner = self._organizations.create_organization(
            Organization(
                id=uuid4(), type=OrganizationType.PARTNER, is_active=True, **data
            )
        )
        logger.info("Partner creado", extra={"organization_id": str(partner.id)})
        return OrganizationResult(organization=partner)


class UpdatePartnerUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, partner_id: UUID, changes: Mapping[str, Any]) -> OrganizationResult:
        data = clean_fields(changes)
        data.pop("type", None)
        if not data:
            return OrganizationResult(error=validation("No fields provided to update"))

        missing = missing_name(data, partial=True)
        if missing:
            return OrganizationResult(error=validation(f"{missing} cannot be empty"))

        if _load_partner(self._organizations, partner_id) is None:
            return OrganizationResult(error=not_found(PARTNER_NOT_FOUND))

        updated = self._organizations.update_organization(partner_id, data)
        if updated is None:
            return OrganizationResult(error=not_found(PARTNER_NOT_FOUND))
        return OrganizationResult(organization=updated)


class SetPartnerActiveUseCase:
    """Activar / desactivar (soft delete)."""

    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, partner_id: UUID, *, is_active: bool) -> OrganizationResult:
        if _load_partner(self._organizations, partner_id) is None:
            return OrganizationResult(error=not_found(PARTNER_NOT_FOUND))

        updated = self._organizations.update_organization(
            partner_id, {"is_active": is_active}
        )
        if updated is None:
            return OrganizationResult(error=not_found(PARTNER_NOT_FOUND))
        return OrganizationResult(organization=updated)


class DeletePartnerUseCase:
    """Borrado definitivo (los contactos del partner caen en cascada)."""

    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, partner_id: UUID) -> CommandResult:
        if _load_partner(self._organizations, partner_id) is None:
            return CommandResult(error=not_found(PARTNER_NOT_FOUND))

        deleted = self._organizations.delete_organization(partner_id)
        if not deleted:
            return CommandResult(error=not_found(PARTNER_NOT_FOUND))

        logger.info("Partner eliminado", extra={"organization_id": str(partner_id)})
        return CommandResult(ok=True)
