"""
===============================================================================
USE CASES: Contacts
===============================================================================

Business Goal:
    Administrar personas de contacto de organizaciones (empresa propia y
    partners), opcionalmente vinculadas a un usuario del sistema (p.ej. un
    chofer con acceso a la app).

Reglas:
    - La organización debe existir y estar activa (VALIDATION).
    - Si se vincula un usuario: debe existir y no tener otro contacto
      vinculado (VALIDATION).
    - Update requiere al menos un campo.
    - Orden por defecto: nameEn ASC.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    ListContactsUseCase, GetContactUseCase, CreateContactUseCase,
    UpdateContactUseCase, SetContactActiveUseCase

Collaborators:
    - ContactRepository
    - OrganizationRepository
    - UserRepository
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID, uuid4

from ....crosscutting.exceptions import UniqueViolationError
from ....crosscutting.pagination import PageParams, resolve_sort
from ....domain.entities import Contact, ContactType, OrganizationType
from ....domain.repositories import (
    ContactRepository,
    OrganizationRepository,
    UserRepository,
)
from ..results import (
    ContactListResult,
    ContactResult,
    ServiceError,
    not_found,
    validation,
)
from .fields import clean_fields, missing_name

CONTACT_NOT_FOUND = "Contact not found"
USER_ALREADY_LINKED = "User already has a contact linked"

CONTACT_SORT_FIELDS = {
    "nameEn": "name_en",
    "nameAr": "name_ar",
    "contactType": "contact_type",
    "mobile": "mobile",
    "createdAt": "created_at",
}
DEFAULT_CONTACT_SORT = "nameEn"


class _ContactRules:
    """Validaciones de referencias compartidas por create / update."""

    def __init__(
        self,
        organizations: OrganizationRepository,
        users: UserRepository,
        contacts: ContactRepository,
    ) -> None:
        self._organizations = organizations
        self._users = users
        self._contacts = contacts

    def check_organization(self, organization_id: UUID) -> ServiceError | None:
        organization = self._organizations.get_organization(organization_id)
        if organization is None:
            return validation("Organization not found")
        if not organization.is_active:
            return validation("Organization is not active")
        return None

    def check_user(
        self, user_id: UUID | None, *, contact_id: UUID | None = None
    ) -> ServiceError | None:
        if user_id is None:
            return None
        if self._users.get_user_by_id(user_id) is None:
            return validation("User not found")
        linked = self._contacts.get_contact_by_user_id(user_id)
        if linked is not None and linked.id != contact_id:
            return validation(USER_ALREADY_LINKED)
        return None


class ListContactsUseCase:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contacts = contact_repository

    def execute_page(
        self,
        params: PageParams,
        *,
        organization_type: OrganizationType | None = None,
        contact_type: ContactType | None = None,
        search: str | None = None,
    ) -> ContactListResult:
        sort_field = resolve_sort(
            params.sort_by, CONTACT_SORT_FIELDS, DEFAULT_CONTACT_SORT
        )
        contacts, total = self._contacts.list_contacts_page(
            params,
            sort_field=sort_field,
            organization_type=organization_type,
            contact_type=contact_type,
            search=(search or "").strip() or None,
        )
        return ContactListResult(contacts=contacts, total=total)


class GetContactUseCase:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contacts = contact_repository

    def execute(self, contact_id: UUID) -> ContactResult:
        found = self._contacts.get_contact(contact_id)
        if found is None:
            return ContactResult(error=not_found(CONTACT_NOT_FOUND))
        return ContactResult(contact=found)


class CreateContactUseCase:
    def __init__(
        self,
        contact_repository: ContactRepository,
        organization_repository: OrganizationRepository,
        user_repository: UserRepository,
    ) -> None:
        self._contacts = contact_repository
        self._rules = _ContactRules(
            organization_repository, user_repository, contact_repository
        )

    def execute(self, fields: Mapping[str, Any]) -> ContactResult:
        data = clean_fields(fields)
        missing = missing_name(data, partial=False)
        if missing:
            return ContactResult(error=validation(f"{missing} is required"))

        organization_id = data.get("organization_id")
        if organization_id is None:
            return ContactResult(error=validation("organization_id is required"))

        error = self._rules.check_organization(organization_id)
        if error is None:
            error = self._rules.check_user(data.get("user_id"))
        if error is not None:
            return ContactResult(error=error)

        data.setdefault("is_active", True)
        try:
            created = self._contacts.create_contact(Contact(id=uuid4(), **data))
        except UniqueViolationError:
            return ContactResult(error=validation(USER_ALREADY_LINKED))
        return ContactResult(contact=self._contacts.get_contact(created.id))


class UpdateContactUseCase:
    def __init__(
        self,
        contact_repository: ContactRepository,
        organization_repository: OrganizationRepository,
        user_repository: UserRepository,
    ) -> None:
        self._contacts = contact_repository
        self._rules = _ContactRules(
            organization_repository, user_repository, contact_repository
        )

    def execute(self, contact_id: UUID, changes: Mapping[str, Any]) -> ContactResult:
        data = clean_fields(changes)
        if not data:
            return ContactResult(error=validation("No fields provided to update"))

        missing = missing_name(data, partial=True)
        if missing:
            return ContactResult(error=validation(f"{missing} cannot be empty"))

        current = self._contacts.get_contact(contact_id)
        if current is None:
            return ContactResult(error=not_found(CONTACT_NOT_FOUND))

        error: ServiceError | None = None
        if "organization_id" in data:
            if data["organization_id"] is None:
                return ContactResult(error=validation("organization_id cannot be null"))
            if data["organization_id"] != current.contact.organization_id:
                error = self._rules.check_organization(data["organization_id"])
        if error is None and "user_id" in data:
            error = self._rules.check_user(data["user_id"], contact_id=contact_id)
        if error is not None:
            return ContactResult(error=error)

        try:
            updated = self._contacts.update_contact(contact_id, data)
        except UniqueViolationError:
            return ContactResult(error=validation(USER_ALREADY_LINKED))
        if updated is None:
            return ContactResult(error=not_found(CONTACT_NOT_FOUND))
        return ContactResult(contact=self._contacts.get_contact(contact_id))


class SetContactActiveUseCase:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contacts = contact_repository

    def execute(self, contact_id: UUID, *, is_active: bool) -> ContactResult:
        if self._contacts.update_contact(contact_id, {"is_active": is_active}) is None:
            return ContactResult(error=not_found(CONTACT_NOT_FOUND))
        return ContactResult(contact=self._contacts.get_contact(contact_id))
