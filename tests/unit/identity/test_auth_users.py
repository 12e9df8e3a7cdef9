"""
Name: Auth Resolution Tests

Responsibilities:
  - Credential validation without user enumeration
  - Bearer header parsing
  - resolve_auth_outcome: header decides the mode, never a fallback
"""

from uuid import uuid4

import pytest
from app.identity.auth_users import (
    AUTH_REQUIRED_MESSAGE,
    MISSING_BEARER_MESSAGE,
    BearerAuth,
    SessionAuth,
    Unauthenticated,
    authenticate_user,
    extract_bearer_token,
    normalize_username,
    resolve_auth_outcome,
)
from app.identity.jwt_tokens import JwtService, TokenErrorKind, TokenVerificationError
from app.identity.sessions import SessionManager
from app.identity.token_blacklist import TokenBlacklist
from app.identity.users import UserRole
from app.infrastructure.repositories.in_memory import InMemorySessionRepository
from app.infrastructure.token_store import InMemoryTokenStore

pytestmark = pytest.mark.unit

PASSWORD = "Secret123!"


@pytest.fixture
def repo(user_repository):
    return user_repository


@pytest.fixture
def factory(user_factory):
    return user_factory


@pytest.fixture
def jwt_service(repo):
    return JwtService(
        secret="auth-resolution-secret-0123456789abcdef",
        expires_in_minutes=30,
        blacklist=TokenBlacklist(InMemoryTokenStore()),
        user_lookup=repo.get_user_by_id,
    )


@pytest.fixture
def session_manager(repo):
    return SessionManager(
        session_repository=InMemorySessionRepository(),
        user_lookup=repo.get_user_by_id,
    )


# ---------------------------------------------------------------------------
# authenticate_user
# ---------------------------------------------------------------------------


class TestAuthenticateUser:
    def test_valid_credentials(self, repo, factory):
        user = factory.create(username="ana@example.com")

        assert authenticate_user(repo, "ana@example.com", PASSWORD) == user

    def test_username_is_normalized(self, repo, factory):
        user = factory.create(username="ana@example.com")

        assert authenticate_user(repo, "  ANA@Example.com ", PASSWORD) == user

    def test_wrong_password(self, repo, factory):
        factory.create(username="ana@example.com")

        assert authenticate_user(repo, "ana@example.com", "nope") is None

    def test_unknown_user(self, repo):
        assert authenticate_user(repo, "ghost@example.com", PASSWORD) is None

    def test_blank_username(self, repo):
        assert authenticate_user(repo, "   ", PASSWORD) is None

    def test_inactive_user(self, repo, factory):
        factory.create(username="ana@example.com", is_active=False)

        assert authenticate_user(repo, "ana@example.com", PASSWORD) is None


def test_normalize_username():
    assert normalize_username("  Foo@Bar.COM ") == "foo@bar.com"
    assert normalize_username(None) == ""


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc.def  ", "abc.def"),
        ("Bearer ", None),
        ("Basic abc", None),
        ("abc.def", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


# ---------------------------------------------------------------------------
# resolve_auth_outcome
# ---------------------------------------------------------------------------


class TestResolveAuthOutcome:
    def test_valid_bearer(self, factory, jwt_service, session_manager):
        user = factory.create(role=UserRole.DRIVER)
        token = jwt_service.issue(user).token

        outcome = resolve_auth_outcome(
            authorization=f"Bearer {token}",
            session_id=None,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert outcome == BearerAuth(principal=user, token=token)

    def test_invalid_bearer_does_not_fall_back_to_session(
        self, factory, jwt_service, session_manager
    ):
        user = factory.create()
        sid = session_manager.start(user).sid

        outcome = resolve_auth_outcome(
            authorization="Bearer garbage",
            session_id=sid,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert isinstance(outcome, Unauthenticated)
        assert outcome.error == TokenErrorKind.INVALID

    def test_empty_bearer(self, jwt_service, session_manager):
        outcome = resolve_auth_outcome(
            authorization="Bearer ",
            session_id=None,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert outcome == Unauthenticated(reason=MISSING_BEARER_MESSAGE)

    def test_valid_session(self, factory, jwt_service, session_manager):
        user = factory.create(role=UserRole.ADMIN)
        sid = session_manager.start(user).sid

        outcome = resolve_auth_outcome(
            authorization=None,
            session_id=sid,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert outcome == SessionAuth(principal=user, session_id=sid)

    def test_session_only_ignores_bearer_header(
        self, factory, jwt_service, session_manager
    ):
        user = factory.create()
        sid = session_manager.start(user).sid

        outcome = resolve_auth_outcome(
            authorization="Bearer garbage",
            session_id=sid,
            jwt_service=jwt_service,
            session_manager=session_manager,
            allow_bearer=False,
        )

        assert isinstance(outcome, SessionAuth)

    def test_nothing_presented(self, jwt_service, session_manager):
        outcome = resolve_auth_outcome(
            authorization=None,
            session_id=None,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert outcome == Unauthenticated(reason=AUTH_REQUIRED_MESSAGE)

    def test_unknown_session(self, jwt_service, session_manager):
        outcome = resolve_auth_outcome(
            authorization=None,
            session_id=uuid4().hex,
            jwt_service=jwt_service,
            session_manager=session_manager,
        )

        assert isinstance(outcome, Unauthenticated)

    def test_misconfigured_secret_raises(self, repo, session_manager):
        service = JwtService(
            secret="",
            expires_in_minutes=30,
            blacklist=TokenBlacklist(InMemoryTokenStore()),
            user_lookup=repo.get_user_by_id,
        )

        with pytest.raises(TokenVerificationError) as exc_info:
            resolve_auth_outcome(
                authorization="Bearer something",
                session_id=None,
                jwt_service=service,
                session_manager=session_manager,
            )

        assert exc_info.value.kind == TokenErrorKind.MISCONFIGURED
