"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for users, sessions, verification tokens,
  organizations and contacts (ports).
- Keep application code independent from PostgreSQL / in-memory adapters.
- Enable dependency inversion and straightforward unit testing.

Collaborators
- identity.users: User, UserRole
- domain.entities: Organization, Contact, EmailVerificationToken, SessionRecord
- infrastructure.repositories: postgres / in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- "Not found" is returned as None, never raised.
- Paged listings return (items, total) so the API can build pagination metadata.
- sort_field values are snake_case entity attributes already whitelisted by the
  caller; implementations still reject unknown fields.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol, Tuple
from uuid import UUID

from ..crosscutting.pagination import PageParams
from ..identity.users import User, UserRole
from .entities import (
    Contact,
    ContactType,
    ContactWithOrganization,
    EmailVerificationToken,
    Organization,
    OrganizationType,
    SessionRecord,
)


class UserRepository(Protocol):
    """R: Interface for user persistence (username = normalized email)."""

    def get_user_by_username(self, username: str) -> Optional[User]: ...

    def get_user_by_id(self, user_id: UUID) -> Optional[User]: ...

    def list_users(self) -> List[User]:
        """R: All users, newest first."""
        ...

    def list_users_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> Tuple[List[User], int]: ...

    def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        full_name: str,
        role: UserRole,
        is_active: bool = True,
        must_change_password: bool = True,
        email_verified: bool = False,
    ) -> User: ...

    def update_user(
        self,
        user_id: UUID,
        *,
        username: str | None = None,
        password_hash: str | None = None,
        full_name: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
        must_change_password: bool | None = None,
        email_verified: bool | None = None,
        last_login_at: datetime | None = None,
    ) -> Optional[User]:
        """R: Partial update; returns the updated user or None if missing."""
        ...

    def ping(self) -> bool: ...


class SessionRepository(Protocol):
    """R: Server-side session table (sid -> user_id, expires_at)."""

    def create_session(
        self, sid: str, user_id: UUID, expires_at: datetime
    ) -> SessionRecord: ...

    def get_session(self, sid: str) -> Optional[SessionRecord]: ...

    def delete_session(self, sid: str) -> None: ...

    def delete_sessions_for_user(self, user_id: UUID) -> int: ...

    def purge_expired_sessions(self, now: datetime) -> int: ...


class VerificationTokenRepository(Protocol):
    """R: Email verification tokens (single-use, expiring)."""

    def invalidate_unverified_for_user(self, user_id: UUID, now: datetime) -> int:
        """
        R: Render every still-actionable unverified token of the user unusable
        (expires_at = now). Rows are kept so issuance history stays countable.
        """
        ...

    def create_token(
        self, *, user_id: UUID, token: str, expires_at: datetime
    ) -> EmailVerificationToken: ...

    def consume_token(self, token: str, now: datetime) -> Optional[UUID]:
        """
        R: Atomically mark a token as verified and flag its owner's email as
        verified (one transaction).

        Returns the owning user_id only if the token existed, was unexpired at
        `now` and had not been verified before; otherwise None.
        """
        ...

    def count_created_since(self, user_id: UUID, since: datetime) -> int: ...


class OrganizationRepository(Protocol):
    """R: Organizations (the single COMPANY + PARTNERs)."""

    def list_organizations(
        self, organization_type: OrganizationType
    ) -> List[Organization]:
        """R: All organizations of a type, ordered by name_en ASC."""
        ...

    def list_organizations_page(
        self,
        organization_type: OrganizationType,
        params: PageParams,
        *,
        sort_field: str,
    ) -> Tuple[List[Organization], int]: ...

    def get_organization(self, organization_id: UUID) -> Optional[Organization]: ...

    def get_company(self) -> Optional[Organization]: ...

    def create_organization(self, organization: Organization) -> Organization: ...

    def update_organization(
        self, organization_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Organization]: ...

    def delete_organization(self, organization_id: UUID) -> bool: ...


class ContactRepository(Protocol):
    """R: Contacts, always returned with their organization."""

    def list_contacts_page(
        self,
        params: PageParams,
        *,
        sort_field: str,
        organization_type: OrganizationType | None = None,
        contact_type: ContactType | None = None,
        search: str | None = None,
    ) -> Tuple[List[ContactWithOrganization], int]: ...

    def get_contact(self, contact_id: UUID) -> Optional[ContactWithOrganization]: ...

    def get_contact_by_user_id(self, user_id: UUID) -> Optional[Contact]: ...

    def create_contact(self, contact: Contact) -> Contact: ...

    def update_contact(
        self, contact_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Contact]: ...
