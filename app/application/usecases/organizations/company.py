"""
===============================================================================
USE CASES: Company (la organización propia, única)
===============================================================================

Reglas:
    - Existe a lo sumo UNA organización COMPANY: crear otra => CONFLICT.
    - get / update sin company => NOT_FOUND.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import uuid4

from ....crosscutting.exceptions import UniqueViolationError
from ....crosscutting.logger import logger
from ....domain.entities import Organization, OrganizationType
from ....domain.repositories import OrganizationRepository
from ..results import OrganizationResult, conflict, not_found, validation
from .fields import clean_fields, missing_name

COMPANY_NOT_FOUND = "Company not found"
COMPANY_EXISTS = "Company already exists"


class GetCompanyUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self) -> OrganizationResult:
        company = self._organizations.get_company()
        if company is None:
            return OrganizationResult(error=not_found(COMPANY_NOT_FOUND))
        return OrganizationResult(organization=company)


class CreateCompanyUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, fields: Mapping[str, Any]) -> OrganizationResult:
        data = clean_fields(fields)
        missing = missing_name(data, partial=False)
        if missing:
            return OrganizationResult(error=validation(f"{missing} is required"))

        if self._organizations.get_company() is not None:
            return OrganizationResult(error=conflict(COMPANY_EXISTS))

        data.pop("type", None)
        data.setdefault("is_active", True)
        try:
            company = self._organizations.create_organization(
                Organization(id=uuid4(), type=OrganizationType.COMPANY, **data)
            )
        except UniqueViolationError:
            return OrganizationResult(error=conflict(COMPANY_EXISTS))
        logger.info("Company creada", extra={"organization_id": str(company.id)})
        return OrganizationResult(organization=company)


class UpdateCompanyUseCase:
    def __init__(self, organization_repository: OrganizationRepository) -> None:
        self._organizations = organization_repository

    def execute(self, changes: Mapping[str, Any]) -> OrganizationResult:
        data = clean_fields(changes)
        data.pop("type", None)
        if not data:
            return OrganizationResult(error=validation("No fields provided to update"))

        missing = missing_name(data, partial=True)
        if missing:
            return OrganizationResult(error=validation(f"{missing} cannot be empty"))

        company = self._organizations.get_company()
        if company is None:
            return OrganizationResult(error=not_found(COMPANY_NOT_FOUND))

        updated = self._organizations.update_organization(company.id, data)
        if updated is None:
            return OrganizationResult(error=not_found(COMPANY_NOT_FOUND))
        return OrganizationResult(organization=updated)
