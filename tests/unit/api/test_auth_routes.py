"""
Name: Auth Routes Tests

Responsibilities:
  - Verify web session login/logout via the httpOnly cookie
  - Verify mobile JWT login, revocation and bearer-only endpoints
  - Verify email verification endpoints (GET link + POST body)
  - Verify login throttling (429 + Retry-After) and the health check

Collaborators:
  - fastapi.testclient.TestClient over the full ASGI stack
  - conftest fixtures: client, login_as, bearer_for, admin_user, driver_user
"""

import pytest
from app.crosscutting.config import Settings, get_settings

pytestmark = pytest.mark.unit

PASSWORD = "Secret123!"


# ============================================================================
# Web session
# ============================================================================


class TestWebLogin:
    def test_login_returns_safe_user_and_sets_cookie(self, client, driver_user):
        response = client.post(
            "/api/login",
            json={"username": "Driver@Example.com ", "password": PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(driver_user.id)
        assert body["username"] == "driver@example.com"
        assert body["fullName"] == "Driver User"
        assert body["role"] == "DRIVER"
        assert body["lastLoginAt"] is not None
        assert "passwordHash" not in body
        assert "password_hash" not in body
        assert "sid" in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_session_cookie_attributes(self, client, driver_user):
        response = client.post(
            "/api/login",
            json={"username": driver_user.username, "password": PASSWORD},
        )

        cookie = response.headers["set-cookie"]
        assert "SameSite=lax" in cookie
        assert "Max-Age=86400" in cookie
        assert "Path=/" in cookie
        assert "Secure" not in cookie

    def test_session_cookie_is_secure_in_production(self, client, driver_user):
        from app.api.main import _fastapi_app as app

        production = Settings(
            app_env="production",
            jwt_secret="prod-secret-0123456789abcdef0123456789",
            admin_password="Prod-Admin-Password-1!",
        )
        app.dependency_overrides[get_settings] = lambda: production
        try:
            response = client.post(
                "/api/login",
                json={"username": driver_user.username, "password": PASSWORD},
            )
        finally:
            app.dependency_overrides.pop(get_settings, None)

        assert response.status_code == 200
        cookie = response.headers["set-cookie"]
        assert "Secure" in cookie
        assert "HttpOnly" in cookie

    def test_wrong_password_is_401_problem(self, client, driver_user):
        response = client.post(
            "/api/login",
            json={"username": driver_user.username, "password": "nope-nope"},
        )

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["code"] == "UNAUTHORIZED"
        assert body["detail"] == "Invalid credentials"
        assert "sid" not in response.cookies

    def test_inactive_user_cannot_login(self, client, user_factory):
        user = user_factory.create(username="gone@example.com", is_active=False)

        response = client.post(
            "/api/login", json={"username": user.username, "password": PASSWORD}
        )

        assert response.status_code == 401

    def test_missing_fields_is_validation_error(self, client):
        response = client.post("/api/login", json={"username": "x@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert any(e.get("field") == "password" for e in body["errors"])


class TestCurrentUser:
    def test_user_endpoint_with_session(self, client, login_as, admin_user):
        login_as(admin_user)

        response = client.get("/api/user")

        assert response.status_code == 200
        assert response.json()["username"] == "admin@example.com"

    def test_user_endpoint_without_session(self, client):
        response = client.get("/api/user")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_user_endpoint_ignores_bearer(self, client, bearer_for, driver_user):
        headers = bearer_for(driver_user)

        response = client.get("/api/user", headers=headers)

        assert response.status_code == 401

    def test_logout_clears_session(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.post("/api/logout")

        assert response.status_code == 200
        assert response.json() == {}
        client.cookies.clear()
        assert client.get("/api/user").status_code == 401

    def test_logout_invalidates_server_side_session(
        self, client, login_as, driver_user
    ):
        sid = login_as(driver_user).cookies["sid"]

        client.post("/api/logout")
        client.cookies.set("sid", sid)

        response = client.get("/api/user")
        assert response.status_code == 401

    def test_logout_without_session_is_ok(self, client):
        response = client.post("/api/logout")

        assert response.status_code == 200


class TestChangePassword:
    def test_change_password_then_login_with_new_one(
        self, client, login_as, user_factory, user_repository
    ):
        user = user_factory.create(
            username="newbie@example.com", must_change_password=True
        )
        login_as(user)

        response = client.post(
            "/api/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "BrandNew456!"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password updated"}
        assert user_repository.get_user_by_id(user.id).must_change_password is False

        relogin = client.post(
            "/api/login",
            json={"username": user.username, "password": "BrandNew456!"},
        )
        assert relogin.status_code == 200

    def test_wrong_current_password(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.post(
            "/api/change-password",
            json={"currentPassword": "not-it-at-all", "newPassword": "BrandNew456!"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Incorrect current password"

    def test_short_new_password_rejected(self, client, login_as, driver_user):
        login_as(driver_user)

        response = client.post(
            "/api/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "short"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_requires_session(self, client):
        response = client.post(
            "/api/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "BrandNew456!"},
        )

        assert response.status_code == 401


# ============================================================================
# Mobile JWT
# ============================================================================


class TestMobileAuth:
    def test_login_mobile_returns_token_and_user(self, client, driver_user):
        response = client.post(
            "/api/auth/login-mobile",
            json={"username": driver_user.username, "password": PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token"].count(".") == 2
        assert body["user"]["id"] == str(driver_user.id)
        assert "sid" not in response.cookies

    def test_login_mobile_invalid_credentials(self, client, driver_user):
        response = client.post(
            "/api/auth/login-mobile",
            json={"username": driver_user.username, "password": "wrong-password"},
        )

        assert response.status_code == 401

    def test_bearer_reaches_universal_endpoint(self, client, bearer_for, driver_user):
        headers = bearer_for(driver_user)

        response = client.get("/api/driver/profile", headers=headers)

        assert response.status_code == 200
        assert response.json()["username"] == driver_user.username

    def test_logout_mobile_revokes_token(self, client, bearer_for, driver_user):
        headers = bearer_for(driver_user)

        response = client.post("/api/auth/logout-mobile", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out"}
        assert client.get("/api/driver/profile", headers=headers).status_code == 401

    def test_logout_mobile_twice_is_ok(self, client, bearer_for, driver_user):
        headers = bearer_for(driver_user)

        client.post("/api/auth/logout-mobile", headers=headers)
        response = client.post("/api/auth/logout-mobile", headers=headers)

        assert response.status_code == 200

    def test_logout_mobile_without_bearer(self, client):
        response = client.post("/api/auth/logout-mobile")

        assert response.status_code == 400
        assert response.json()["detail"] == "Token required"

    def test_logout_mobile_with_garbage_token(self, client):
        response = client.post(
            "/api/auth/logout-mobile",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_token_of_deactivated_user_is_rejected(
        self, client, bearer_for, driver_user, user_repository
    ):
        headers = bearer_for(driver_user)
        user_repository.update_user(driver_user.id, is_active=False)

        response = client.get("/api/driver/profile", headers=headers)

        assert response.status_code == 401


# ============================================================================
# Email verification
# ============================================================================


class TestEmailVerification:
    def _issue_token(self, user) -> str:
        from app.container import get_issue_verification_use_case

        return get_issue_verification_use_case().execute(user).token

    def test_verify_via_link(self, client, driver_user, user_repository):
        token = self._issue_token(driver_user)

        response = client.get("/api/auth/verify-email", params={"token": token})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Email verified successfully",
        }
        assert user_repository.get_user_by_id(driver_user.id).email_verified is True

    def test_verify_via_post_is_single_use(self, client, driver_user):
        token = self._issue_token(driver_user)

        first = client.post("/api/auth/verify-email", json={"token": token})
        second = client.post("/api/auth/verify-email", json={"token": token})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["detail"] == "Invalid or expired verification token"

    def test_verify_without_token(self, client):
        response = client.get("/api/auth/verify-email")

        assert response.status_code == 400
        assert response.json()["detail"] == "Verification token is required"

    def test_resend_with_session(self, client, login_as, driver_user, notifications):
        login_as(driver_user)

        response = client.post("/api/auth/resend-verification-email")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert notifications.sent[-1]["workflow_id"] == "verify-email"
        assert notifications.sent[-1]["user_id"] == driver_user.id

    def test_resend_with_bearer(self, client, bearer_for, driver_user, notifications):
        headers = bearer_for(driver_user)

        response = client.post("/api/auth/resend-verification-email", headers=headers)

        assert response.status_code == 200
        assert len(notifications.sent) == 1

    def test_resend_when_already_verified(self, client, login_as, admin_user):
        login_as(admin_user)

        response = client.post("/api/auth/resend-verification-email")

        assert response.status_code == 400
        assert response.json()["detail"] == "Email is already verified"

    def test_resend_requires_auth(self, client):
        response = client.post("/api/auth/resend-verification-email")

        assert response.status_code == 401


# ============================================================================
# Throttling + health
# ============================================================================


class TestLoginRateLimit:
    def test_eleventh_attempt_is_rejected(self, client, driver_user):
        payload = {"username": driver_user.username, "password": "wrong-password"}
        for _ in range(10):
            assert client.post("/api/login", json=payload).status_code == 401

        response = client.post("/api/login", json=payload)

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        body = response.json()
        assert body["code"] == "RATE_LIMITED"
        assert body["detail"].startswith("Too many login attempts")

    def test_successful_logins_also_count(self, client, driver_user):
        payload = {"username": driver_user.username, "password": PASSWORD}
        for _ in range(10):
            assert client.post("/api/login", json=payload).status_code == 200

        assert client.post("/api/login", json=payload).status_code == 429

    def test_mobile_login_shares_the_window(self, client, driver_user):
        payload = {"username": driver_user.username, "password": "wrong-password"}
        for _ in range(10):
            client.post("/api/login", json=payload)

        response = client.post("/api/auth/login-mobile", json=payload)

        assert response.status_code == 429


def test_healthz_reports_connected(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["db"] == "connected"


def test_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-Id": "req-abc-123"})

    assert response.headers["X-Request-Id"] == "req-abc-123"
    assert response.json()["request_id"] == "req-abc-123"
