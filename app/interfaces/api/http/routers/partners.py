"""
===============================================================================
TARJETA CRC — app/interfaces/api/http/routers/partners.py
===============================================================================

Name:
    Partners / Company Router

Responsibilities:
    - CRUD de partners (organizaciones PARTNER): listado, paginado, detalle,
      alta, patch, activar/desactivar (soft) y borrado (hard).
    - Empresa propia (COMPANY, única): get / create / patch.
    - Helpers de selección para formularios de contactos
      (/admin/organizations/partners, /admin/organizations/company).
    - Todo admin-only.

Collaborators:
    - application.usecases.organizations
    - schemas.organizations
===============================================================================
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

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
from app.application.usecases.results import OrganizationResult
from app.container import (
    get_create_company_use_case,
    get_create_partner_use_case,
    get_delete_partner_use_case,
    get_get_company_use_case,
    get_get_partner_use_case,
    get_list_partners_use_case,
    get_set_partner_active_use_case,
    get_update_company_use_case,
    get_update_partner_use_case,
)
from app.crosscutting.pagination import Page, PageParams, SortOrder, build_page
from app.identity.auth_users import require_admin
from app.identity.users import User

from ..dependencies import page_params
from ..error_mapping import raise_service_error
from ..schemas.organizations import (
    CreateOrganizationReq,
    OrganizationRes,
    UpdateOrganizationReq,
    to_organization_res,
)
from ..schemas.users import MessageRes

router = APIRouter(tags=["admin-organizations"])

PARTNER_DELETED_MESSAGE = "Partner deleted successfully"


def _organization_or_raise(result: OrganizationResult) -> OrganizationRes:
    if result.error:
        raise_service_error(result.error)
    return to_organization_res(result.organization)


# =============================================================================
# Partners
# =============================================================================


@router.get("/admin/partners", response_model=list[OrganizationRes])
def list_partners(
    use_case: ListPartnersUseCase = Depends(get_list_partners_use_case),
    _admin: User = Depends(require_admin()),
):
    return [to_organization_res(o) for o in use_case.execute().organizations]


@router.get("/admin/partners/paginated", response_model=Page[OrganizationRes])
def list_partners_paginated(
    params: PageParams = Depends(page_params(SortOrder.ASC)),
    use_case: ListPartnersUseCase = Depends(get_list_partners_use_case),
    _admin: User = Depends(require_admin()),
):
    result = use_case.execute_page(params)
    return build_page(
        [to_organization_res(o) for o in result.organizations], result.total, params
    )


@router.get("/admin/partners/{partner_id}", response_model=OrganizationRes)
def get_partner(
    partner_id: UUID,
    use_case: GetPartnerUseCase = Depends(get_get_partner_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(partner_id))


@router.post("/admin/partners", response_model=OrganizationRes, status_code=201)
def create_partner(
    req: CreateOrganizationReq,
    use_case: CreatePartnerUseCase = Depends(get_create_partner_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(req.changes()))


@router.patch("/admin/partners/{partner_id}", response_model=OrganizationRes)
def update_partner(
    partner_id: UUID,
    req: UpdateOrganizationReq,
    use_case: UpdatePartnerUseCase = Depends(get_update_partner_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(partner_id, req.changes()))


@router.patch("/admin/partners/{partner_id}/activate", response_model=OrganizationRes)
def activate_partner(
    partner_id: UUID,
    use_case: SetPartnerActiveUseCase = Depends(get_set_partner_active_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(partner_id, is_active=True))


@router.patch(
    "/admin/partners/{partner_id}/deactivate", response_model=OrganizationRes
)
def deactivate_partner(
    partner_id: UUID,
    use_case: SetPartnerActiveUseCase = Depends(get_set_partner_active_use_case),
    _admin: User = Depends(require_admin()),
):
    """Soft delete: el partner queda inactivo, sus contactos se conservan."""
    return _organization_or_raise(use_case.execute(partner_id, is_active=False))


@router.delete("/admin/partners/{partner_id}", response_model=MessageRes)
def delete_partner(
    partner_id: UUID,
    use_case: DeletePartnerUseCase = Depends(get_delete_partner_use_case),
    _admin: User = Depends(require_admin()),
):
    """Hard delete (los contactos del partner se borran en cascada)."""
    result = use_case.execute(partner_id)
    if result.error:
        raise_service_error(result.error)
    return MessageRes(message=PARTNER_DELETED_MESSAGE)


# =============================================================================
# Company (única)
# =============================================================================


@router.get("/admin/company", response_model=OrganizationRes)
def get_company(
    use_case: GetCompanyUseCase = Depends(get_get_company_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute())


@router.post("/admin/company", response_model=OrganizationRes, status_code=201)
def create_company(
    req: CreateOrganizationReq,
    use_case: CreateCompanyUseCase = Depends(get_create_company_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(req.changes()))


@router.patch("/admin/company", response_model=OrganizationRes)
def update_company(
    req: UpdateOrganizationReq,
    use_case: UpdateCompanyUseCase = Depends(get_update_company_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute(req.changes()))


# =============================================================================
# Helpers de selección (formularios de contactos)
# =============================================================================


@router.get("/admin/organizations/partners", response_model=list[OrganizationRes])
def organization_partners(
    use_case: ListPartnersUseCase = Depends(get_list_partners_use_case),
    _admin: User = Depends(require_admin()),
):
    return [to_organization_res(o) for o in use_case.execute().organizations]


@router.get("/admin/organizations/company", response_model=OrganizationRes)
def organization_company(
    use_case: GetCompanyUseCase = Depends(get_get_company_use_case),
    _admin: User = Depends(require_admin()),
):
    return _organization_or_raise(use_case.execute())
