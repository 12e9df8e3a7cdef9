"""
Name: Admin Users + Notifications Routes Tests

Responsibilities:
  - Verify RBAC on /api/admin/* (401 without auth, 403 for DRIVER)
  - Verify user creation (temp password once), patch, reset and pagination
  - Verify the welcome email trigger

Collaborators:
  - conftest fixtures: client, login_as, bearer_for, admin_user, driver_user,
    notifications, user_repository
"""

from uuid import uuid4

import pytest

pytestmark = pytest.mark.unit

PASSWORD = "Secret123!"


@pytest.fixture
def as_admin(client, login_as, admin_user):
    login_as(admin_user)
    return client


# ============================================================================
# Access control
# ============================================================================


class TestAdminAccess:
    def test_without_credentials_is_401(self, client):
        response = client.get("/api/admin/users")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_driver_session_is_403(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.get("/api/admin/users")

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "FORBIDDEN"
        assert body["detail"] == "Insufficient role"

    def test_driver_bearer_is_403(self, client, bearer_for, driver_user):
        response = client.get("/api/admin/users", headers=bearer_for(driver_user))

        assert response.status_code == 403

    def test_admin_bearer_is_accepted(self, client, bearer_for, admin_user):
        response = client.get("/api/admin/users", headers=bearer_for(admin_user))

        assert response.status_code == 200


# ============================================================================
# Users
# ============================================================================


class TestCreateUser:
    def test_creates_user_with_temp_password(self, as_admin, notifications):
        response = as_admin.post(
            "/api/admin/users",
            json={"email": "New.Driver@Example.com", "fullName": "  New Driver "},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "new.driver@example.com"
        assert body["fullName"] == "New Driver"
        assert body["role"] == "DRIVER"
        assert body["isActive"] is True
        assert body["mustChangePassword"] is True
        assert body["emailVerified"] is False
        assert len(body["tempPassword"]) >= 8
        assert [n["workflow_id"] for n in notifications.sent] == ["verify-email"]

    def test_temp_password_allows_login(self, as_admin):
        created = as_admin.post(
            "/api/admin/users",
            json={"email": "fresh@example.com", "fullName": "Fresh Driver"},
        ).json()

        response = as_admin.post(
            "/api/auth/login-mobile",
            json={"username": "fresh@example.com", "password": created["tempPassword"]},
        )

        assert response.status_code == 200
        assert response.json()["user"]["mustChangePassword"] is True

    def test_duplicate_email_is_409(self, as_admin, driver_user):
        response = as_admin.post(
            "/api/admin/users",
            json={"email": driver_user.username, "fullName": "Copy Cat"},
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already exists"

    def test_duplicate_email_lost_race_is_409(
        self, as_admin, driver_user, user_repository, monkeypatch
    ):
        monkeypatch.setattr(user_repository, "get_user_by_username", lambda _: None)

        response = as_admin.post(
            "/api/admin/users",
            json={"email": driver_user.username, "fullName": "Copy Cat"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"
        assert response.json()["detail"] == "Email already exists"

    def test_invalid_email_is_400(self, as_admin):
        response = as_admin.post(
            "/api/admin/users", json={"email": "not-an-email", "fullName": "Nobody"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert any(e.get("field") == "email" for e in body["errors"])

    def test_invalid_role_is_400(self, as_admin):
        response = as_admin.post(
            "/api/admin/users",
            json={"email": "x@example.com", "fullName": "Xavier", "role": "ROOT"},
        )

        assert response.status_code == 400


class TestListUsers:
    def test_list_returns_safe_users(self, as_admin, driver_user):
        response = as_admin.get("/api/admin/users")

        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()}
        assert usernames == {"admin@example.com", "driver@example.com"}
        assert all("passwordHash" not in u for u in response.json())

    def test_paginated_shape_and_filters(self, as_admin, user_factory):
        for i in range(3):
            user_factory.create(username=f"omar{i}@example.com", full_name=f"Omar {i}")

        response = as_admin.get(
            "/api/admin/users/paginated",
            params={"role": "DRIVER", "search": "omar", "page": 1, "limit": 2},
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
        }

    def test_paginated_sort_by_full_name(self, as_admin, user_factory):
        user_factory.create(username="zed@example.com", full_name="Zed")
        user_factory.create(username="amy@example.com", full_name="Amy")

        response = as_admin.get(
            "/api/admin/users/paginated",
            params={"sortBy": "fullName", "sortOrder": "asc"},
        )

        names = [u["fullName"] for u in response.json()["data"]]
        assert names == sorted(names)

    def test_limit_above_max_is_400(self, as_admin):
        response = as_admin.get("/api/admin/users/paginated", params={"limit": 101})

        assert response.status_code == 400


class TestUpdateUser:
    def test_patch_fields(self, as_admin, driver_user):
        response = as_admin.patch(
            f"/api/admin/users/{driver_user.id}",
            json={"fullName": "Renamed Driver", "isActive": False},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["fullName"] == "Renamed Driver"
        assert body["isActive"] is False

    def test_patch_email_resets_verification(self, as_admin, user_factory):
        user = user_factory.create(username="old@example.com", email_verified=True)

        response = as_admin.patch(
            f"/api/admin/users/{user.id}", json={"email": "New@Example.com"}
        )

        assert response.status_code == 200
        assert response.json()["username"] == "new@example.com"
        assert response.json()["emailVerified"] is False

    def test_cannot_deactivate_self(self, as_admin, admin_user):
        response = as_admin.patch(
            f"/api/admin/users/{admin_user.id}", json={"isActive": False}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot deactivate your own account"

    def test_empty_patch_is_400(self, as_admin, driver_user):
        response = as_admin.patch(f"/api/admin/users/{driver_user.id}", json={})

        assert response.status_code == 400

    def test_unknown_user_is_404(self, as_admin):
        response = as_admin.patch(
            f"/api/admin/users/{uuid4()}", json={"fullName": "Ghost User"}
        )

        assert response.status_code == 404

    def test_invalid_uuid_is_400(self, as_admin):
        response = as_admin.patch(
            "/api/admin/users/not-a-uuid", json={"fullName": "Ghost User"}
        )

        assert response.status_code == 400


class TestResetPassword:
    def test_reset_returns_new_temp_password(self, as_admin, driver_user, client):
        response = as_admin.post(f"/api/admin/users/{driver_user.id}/reset-password")

        assert response.status_code == 200
        body = response.json()
        assert body["userId"] == str(driver_user.id)
        temp = body["tempPassword"]

        old = client.post(
            "/api/auth/login-mobile",
            json={"username": driver_user.username, "password": PASSWORD},
        )
        new = client.post(
            "/api/auth/login-mobile",
            json={"username": driver_user.username, "password": temp},
        )
        assert old.status_code == 401
        assert new.status_code == 200
        assert new.json()["user"]["mustChangePassword"] is True

    def test_reset_ends_existing_sessions(
        self, client, login_as, admin_user, user_factory
    ):
        target = user_factory.create(username="target@example.com")
        target_sid = login_as(target).cookies["sid"]
        login_as(admin_user)

        client.post(f"/api/admin/users/{target.id}/reset-password")

        client.cookies.set("sid", target_sid)
        assert client.get("/api/user").status_code == 401

    def test_reset_unknown_user(self, as_admin):
        response = as_admin.post(f"/api/admin/users/{uuid4()}/reset-password")

        assert response.status_code == 404


# ============================================================================
# Notifications
# ============================================================================


class TestSendWelcome:
    def test_send_welcome(self, as_admin, driver_user, notifications):
        response = as_admin.post(
            "/api/admin/notifications/send-welcome",
            json={"userId": str(driver_user.id), "tempPassword": "Tmp-12345"},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        sent = notifications.sent[-1]
        assert sent["workflow_id"] == "welcome-user"
        assert sent["payload"]["tempPassword"] == "Tmp-12345"

    def test_unknown_user_is_404(self, as_admin):
        response = as_admin.post(
            "/api/admin/notifications/send-welcome",
            json={"userId": str(uuid4()), "tempPassword": "Tmp-12345"},
        )

        assert response.status_code == 404

    def test_missing_temp_password_is_400(self, as_admin, driver_user):
        response = as_admin.post(
            "/api/admin/notifications/send-welcome",
            json={"userId": str(driver_user.id)},
        )

        assert response.status_code == 400

    def test_requires_admin(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.post(
            "/api/admin/notifications/send-welcome",
            json={"userId": str(driver_user.id), "tempPassword": "Tmp-12345"},
        )

        assert response.status_code == 403
