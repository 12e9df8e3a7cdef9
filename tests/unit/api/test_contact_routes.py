"""
Name: Contact Routes Tests

Responsibilities:
  - Verify contact creation with the embedded organization
  - Verify reference rules (active organization, single user link)
  - Verify patch semantics (absent field untouched, explicit null written)
  - Verify paginated filters and activation toggles

Collaborators:
  - conftest fixtures: client, login_as, admin_user, driver_user
"""

from uuid import uuid4

import pytest

pytestmark = pytest.mark.unit


@pytest.fixture
def as_admin(client, login_as, admin_user):
    login_as(admin_user)
    return client


@pytest.fixture
def partner(as_admin) -> dict:
    response = as_admin.post(
        "/api/admin/partners", json={"nameEn": "Gulf Freight", "nameAr": "الخليج"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def company(as_admin) -> dict:
    response = as_admin.post(
        "/api/admin/company", json={"nameEn": "Logistics HQ", "nameAr": "المقر"}
    )
    assert response.status_code == 201
    return response.json()


def _contact_payload(organization_id: str, **extra) -> dict:
    return {
        "organizationId": organization_id,
        "nameEn": "Omar Haddad",
        "nameAr": "عمر حداد",
        "contactType": "DRIVER",
        **extra,
    }


def _create_contact(client, organization_id: str, **extra) -> dict:
    response = client.post(
        "/api/admin/contacts", json=_contact_payload(organization_id, **extra)
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateContact:
    def test_create_embeds_organization(self, as_admin, partner, driver_user):
        body = _create_contact(
            as_admin,
            partner["id"],
            userId=str(driver_user.id),
            mobile=" +966500000000 ",
        )

        assert body["organizationId"] == partner["id"]
        assert body["userId"] == str(driver_user.id)
        assert body["contactType"] == "DRIVER"
        assert body["mobile"] == "+966500000000"
        assert body["isActive"] is True
        assert body["organization"]["nameEn"] == "Gulf Freight"
        assert body["organization"]["type"] == "PARTNER"

    def test_company_contact(self, as_admin, company):
        body = _create_contact(as_admin, company["id"], contactType="MANAGER")

        assert body["organization"]["type"] == "COMPANY"

    def test_unknown_organization(self, as_admin):
        response = as_admin.post(
            "/api/admin/contacts", json=_contact_payload(str(uuid4()))
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Organization not found"

    def test_inactive_organization(self, as_admin, partner):
        as_admin.patch(f"/api/admin/partners/{partner['id']}/deactivate")

        response = as_admin.post(
            "/api/admin/contacts", json=_contact_payload(partner["id"])
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Organization is not active"

    def test_user_can_be_linked_once(self, as_admin, partner, driver_user):
        _create_contact(as_admin, partner["id"], userId=str(driver_user.id))

        response = as_admin.post(
            "/api/admin/contacts",
            json=_contact_payload(partner["id"], userId=str(driver_user.id)),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User already has a contact linked"

    def test_invalid_contact_type(self, as_admin, partner):
        response = as_admin.post(
            "/api/admin/contacts",
            json=_contact_payload(partner["id"], contactType="PILOT"),
        )

        assert response.status_code == 400

    def test_missing_organization_id(self, as_admin):
        payload = _contact_payload(str(uuid4()))
        del payload["organizationId"]

        response = as_admin.post("/api/admin/contacts", json=payload)

        assert response.status_code == 400


class TestUpdateContact:
    def test_patch_leaves_absent_fields(self, as_admin, partner):
        created = _create_contact(as_admin, partner["id"], mobile="+966500000000")

        response = as_admin.patch(
            f"/api/admin/contacts/{created['id']}", json={"nationality": "SA"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["nationality"] == "SA"
        assert body["mobile"] == "+966500000000"

    def test_explicit_null_unlinks_user(self, as_admin, partner, driver_user):
        created = _create_contact(as_admin, partner["id"], userId=str(driver_user.id))

        response = as_admin.patch(
            f"/api/admin/contacts/{created['id']}", json={"userId": None}
        )

        assert response.status_code == 200
        assert response.json()["userId"] is None

    def test_move_to_other_organization(self, as_admin, partner, company):
        created = _create_contact(as_admin, partner["id"])

        response = as_admin.patch(
            f"/api/admin/contacts/{created['id']}",
            json={"organizationId": company["id"]},
        )

        assert response.status_code == 200
        assert response.json()["organization"]["type"] == "COMPANY"

    def test_null_organization_is_rejected(self, as_admin, partner):
        created = _create_contact(as_admin, partner["id"])

        response = as_admin.patch(
            f"/api/admin/contacts/{created['id']}", json={"organizationId": None}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "organization_id cannot be null"

    def test_unknown_contact(self, as_admin):
        response = as_admin.patch(
            f"/api/admin/contacts/{uuid4()}", json={"nationality": "SA"}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Contact not found"

    def test_toggle_active(self, as_admin, partner):
        created = _create_contact(as_admin, partner["id"])

        off = as_admin.patch(f"/api/admin/contacts/{created['id']}/deactivate")
        on = as_admin.patch(f"/api/admin/contacts/{created['id']}/activate")

        assert off.json()["isActive"] is False
        assert on.json()["isActive"] is True


class TestListContacts:
    def test_get_contact(self, as_admin, partner):
        created = _create_contact(as_admin, partner["id"])

        response = as_admin.get(f"/api/admin/contacts/{created['id']}")

        assert response.status_code == 200
        assert response.json()["organization"]["id"] == partner["id"]

    def test_filters(self, as_admin, partner, company):
        _create_contact(as_admin, partner["id"], nameEn="Zaid Driver")
        _create_contact(
            as_admin, partner["id"], nameEn="Sara Sales", contactType="SALES"
        )
        _create_contact(as_admin, company["id"], nameEn="Adel Manager")

        by_org = as_admin.get(
            "/api/admin/contacts/paginated", params={"organizationType": "PARTNER"}
        ).json()
        by_type = as_admin.get(
            "/api/admin/contacts/paginated", params={"contactType": "SALES"}
        ).json()
        by_search = as_admin.get(
            "/api/admin/contacts/paginated", params={"search": "adel"}
        ).json()

        assert [c["nameEn"] for c in by_org["data"]] == ["Sara Sales", "Zaid Driver"]
        assert by_org["pagination"]["total"] == 2
        assert [c["nameEn"] for c in by_type["data"]] == ["Sara Sales"]
        assert [c["nameEn"] for c in by_search["data"]] == ["Adel Manager"]

    def test_deleting_partner_removes_its_contacts(self, as_admin, partner):
        created = _create_contact(as_admin, partner["id"])

        as_admin.delete(f"/api/admin/partners/{partner['id']}")

        assert as_admin.get(f"/api/admin/contacts/{created['id']}").status_code == 404

    def test_requires_admin(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.get("/api/admin/contacts/paginated")

        assert response.status_code == 403
