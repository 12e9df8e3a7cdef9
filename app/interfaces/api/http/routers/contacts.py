"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/contacts.py
===============================================================================

Name:
    Contacts Router

Responsibilities:
    - Listado paginado con filtros (organizationType, contactType, search) y
      la organización embebida en cada item.
    - Detalle, alta, patch, activar / desactivar.
    - Todo admin-only.

Collaborators:
    - application.usecases.organizations (contact use cases)
    - schemas.organizations (ContactRes, Create/UpdateContactReq)
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.application.usecases.organizations import (
    CreateContactUseCase,
    GetContactUseCase,
    ListContactsUseCase,
    SetContactActiveUseCase,
    UpdateContactUseCase,
)
from app.application.usecases.results import ContactResult
from app.container import (
    get_create_contact_use_case,
    get_get_contact_use_case,
    get_list_contacts_use_case,
    get_set_contact_active_use_case,
    get_update_contact_use_case,
)
from app.crosscutting.pagination import Page, PageParams, SortOrder, build_page
from app.domain.entities import ContactType, OrganizationType
from app.identity.auth_users import require_admin
from app.identity.users import User

from ..dependencies import page_params
from ..error_mapping import raise_service_error
from ..schemas.organizations import (
    ContactRes,
    CreateContactReq,
    UpdateContactReq,
    to_contact_res,
)

router = APIRouter(prefix="/admin/contacts", tags=["admin-contacts"])


def _contact_or_raise(result: ContactResult) -> ContactRes:
    if result.error:
        raise_service_error(result.error)
    return to_contact_res(result.contact)


@router.get("/paginated", response_model=Page[ContactRes])
def list_contacts_paginated(
    params: PageParams = Depends(page_params(SortOrder.ASC)),
    organization_type: OrganizationType | None = Query(None, alias="organizationType"),
    contact_type: ContactType | None = Query(None, alias="contactType"),
    search: str | None = Query(None, max_length=200),
    use_case: ListContactsUseCase = Depends(get_list_contacts_use_case),
    _admin: User = Depends(require_admin()),
):
    result = use_case.execute_page(
        params,
        organization_type=organization_type,
        contact_type=contact_type,
        search=search,
    )
    return build_page(
        [to_contact_res(c) for c in result.contacts], result.total, params
    )


@router.get("/{contact_id}", response_model=ContactRes)
def get_contact(
    contact_id: UUID,
    use_case: GetContactUseCase = Depends(get_get_contact_use_case),
    _admin: User = Depends(require_admin()),
):
    return _contact_or_raise(use_case.execute(contact_id))


@router.post("", response_model=ContactRes, status_code=201)
def create_contact(
    req: CreateContactReq,
    use_case: CreateContactUseCase = Depends(get_create_contact_use_case),
    _admin: User = Depends(require_admin()),
):
    return _contact_or_raise(use_case.execute(req.changes()))


@router.patch("/{contact_id}", response_model=ContactRes)
def update_contact(
    contact_id: UUID,
    req: UpdateContactReq,
    use_case: UpdateContactUseCase = Depends(get_update_contact_use_case),
    _admin: User = Depends(require_admin()),
):
    return _contact_or_raise(use_case.execute(contact_id, req.changes()))


@router.patch("/{contact_id}/activate", response_model=ContactRes)
def activate_contact(
    contact_id: UUID,
    use_case: SetContactActiveUseCase = Depends(get_set_contact_active_use_case),
    _admin: User = Depends(require_admin()),
):
    return _contact_or_raise(use_case.execute(contact_id, is_active=True))


@router.patch("/{contact_id}/deactivate", response_model=ContactRes)
def deactivate_contact(
    contact_id: UUID,
    use_case: SetContactActiveUseCase = Depends(get_set_contact_active_use_case),
    _admin: User = Depends(require_admin()),
):
    return _contact_or_raise(use_case.execute(contact_id, is_active=False))
