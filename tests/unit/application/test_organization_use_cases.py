"""
Name: Partner / Company Use Case Tests

Responsibilities:
  - Partner CRUD + activate/deactivate + hard delete
  - Single company invariant
  - Bilingual name validation and field cleaning
"""

from uuid import uuid4

import pytest
from app.application.usecases.organizations import (
    CreateCompanyUseCase,
    CreatePartnerUseCase,
    DeletePartnerUseCase,
    GetCompanyUseCase,
    GetPartnerUseCase,
    ListPartnersUseCase,
    SetPartnerActiveUseCase,
    UpdateCompanyUseCase,
    UpdatePartnerUseCase,
)
from app.application.usecases.organizations.fields import clean_fields, missing_name
from app.application.usecases.results import ServiceErrorKind
from app.crosscutting.pagination import PageParams, SortOrder
from app.domain.entities import OrganizationType
from app.infrastructure.repositories.in_memory import InMemoryOrganizationRepository

pytestmark = pytest.mark.unit

NAMES = {"name_en": "Gulf Haulage", "name_ar": "الخليج للنقل"}


@pytest.fixture
def organizations():
    return InMemoryOrganizationRepository()


@pytest.fixture
def partner(organizations):
    return CreatePartnerUseCase(organizations).execute(dict(NAMES)).organization


def test_clean_fields_strips_and_blanks_email():
    assert clean_fields({"name_en": "  Acme ", "email": "  ", "city": None}) == {
        "name_en": "Acme",
        "email": None,
        "city": None,
    }


def test_missing_name():
    assert missing_name({"name_en": "x"}, partial=False) == "name_ar"
    assert missing_name({"name_en": "x"}, partial=True) is None
    assert missing_name({"name_ar": ""}, partial=True) == "name_ar"


class TestPartners:
    def test_create_forces_partner_type_and_active(self, organizations):
        result = CreatePartnerUseCase(organizations).execute(
            {**NAMES, "type": "COMPANY", "is_active": False, "city": " Dubai "}
        )

        assert result.error is None
        assert result.organization.type == OrganizationType.PARTNER
        assert result.organization.is_active is True
        assert result.organization.city == "Dubai"

    def test_create_requires_both_names(self, organizations):
        result = CreatePartnerUseCase(organizations).execute({"name_en": "Only EN"})

        assert result.error.kind == ServiceErrorKind.VALIDATION
        assert result.error.message == "name_ar is required"

    def test_get(self, organizations, partner):
        result = GetPartnerUseCase(organizations).execute(partner.id)

        assert result.organization == partner

    def test_company_is_not_a_partner(self, organizations):
        company = CreateCompanyUseCase(organizations).execute(dict(NAMES)).organization

        result = GetPartnerUseCase(organizations).execute(company.id)

        assert result.error.kind == ServiceErrorKind.NOT_FOUND
        assert result.error.message == "Partner not found"

    def test_list_sorted_by_name(self, organizations):
        create = CreatePartnerUseCase(organizations)
        create.execute({"name_en": "Zulu", "name_ar": "ز"})
        create.execute({"name_en": "Alpha", "name_ar": "أ"})

        result = ListPartnersUseCase(organizations).execute()

        assert [o.name_en for o in result.organizations] == ["Alpha", "Zulu"]
        assert result.total == 2

    def test_list_page(self, organizations):
        create = CreatePartnerUseCase(organizations)
        for name in ("Bravo", "Alpha", "Charlie"):
            create.execute({"name_en": name, "name_ar": name})

        result = ListPartnersUseCase(organizations).execute_page(
            PageParams(page=1, limit=2, sort_by="nameEn", sort_order=SortOrder.ASC)
        )

        assert result.total == 3
        assert [o.name_en for o in result.organizations] == ["Alpha", "Bravo"]

    def test_update(self, organizations, partner):
        result = UpdatePartnerUseCase(organizations).execute(
            partner.id, {"phone": "+971 4 000", "type": "COMPANY"}
        )

        assert result.organization.phone == "+971 4 000"
        assert result.organization.type == OrganizationType.PARTNER

    def test_update_rejects_blank_name(self, organizations, partner):
        result = UpdatePartnerUseCase(organizations).execute(
            partner.id, {"name_en": "   "}
        )

        assert result.error.message == "name_en cannot be empty"

    def test_update_without_fields(self, organizations, partner):
        result = UpdatePartnerUseCase(organizations).execute(partner.id, {})

        assert result.error.message == "No fields provided to update"

    def test_update_unknown(self, organizations):
        result = UpdatePartnerUseCase(organizations).execute(uuid4(), {"city": "X"})

        assert result.error.kind == ServiceErrorKind.NOT_FOUND

    def test_deactivate_and_activate(self, organizations, partner):
        use_case = SetPartnerActiveUseCase(organizations)

        deactivated = use_case.execute(partner.id, is_active=False).organization
        assert deactivated.is_active is False
        reactivated = use_case.execute(partner.id, is_active=True).organization
        assert reactivated.is_active is True

    def test_delete(self, organizations, partner):
        result = DeletePartnerUseCase(organizations).execute(partner.id)

        assert result.ok is True
        assert organizations.get_organization(partner.id) is None

    def test_delete_unknown(self, organizations):
        result = DeletePartnerUseCase(organizations).execute(uuid4())

        assert result.ok is False
        assert result.error.kind == ServiceErrorKind.NOT_FOUND


class TestCompany:
    def test_get_before_create(self, organizations):
        result = GetCompanyUseCase(organizations).execute()

        assert result.error.kind == ServiceErrorKind.NOT_FOUND
        assert result.error.message == "Company not found"

    def test_create_once(self, organizations):
        create = CreateCompanyUseCase(organizations)

        first = create.execute({**NAMES, "tax_id": "TRN-1"})
        second = create.execute(dict(NAMES))

        assert first.organization.type == OrganizationType.COMPANY
        assert first.organization.tax_id == "TRN-1"
        assert second.error.kind == ServiceErrorKind.CONFLICT
        assert second.error.message == "Company already exists"
        current = GetCompanyUseCase(organizations).execute().organization
        assert current == first.organization

    def test_concurrent_create_is_conflict(self, organizations, monkeypatch):
        CreateCompanyUseCase(organizations).execute(dict(NAMES))
        monkeypatch.setattr(organizations, "get_company", lambda: None)

        result = CreateCompanyUseCase(organizations).execute(dict(NAMES))

        assert result.error.kind == ServiceErrorKind.CONFLICT
        assert result.error.message == "Company already exists"
        assert len(organizations.list_organizations(OrganizationType.COMPANY)) == 1

    def test_update(self, organizations):
        CreateCompanyUseCase(organizations).execute(dict(NAMES))

        result = UpdateCompanyUseCase(organizations).execute({"city": "Abu Dhabi"})

        assert result.organization.city == "Abu Dhabi"
        assert result.organization.type == OrganizationType.COMPANY

    def test_update_missing_company(self, organizations):
        result = UpdateCompanyUseCase(organizations).execute({"city": "Abu Dhabi"})

        assert result.error.kind == ServiceErrorKind.NOT_FOUND
