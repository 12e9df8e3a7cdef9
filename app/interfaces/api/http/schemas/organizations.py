"""
===============================================================================
TARJETA CRC — schemas/organizations.py
===============================================================================

Módulo:
    Schemas HTTP para organizaciones (partners / company) y contactos

Responsabilidades:
    - DTOs de request con aliases camelCase; `email` acepta "" (= borrar).
    - DTOs de response con la organización embebida en cada contacto.
    - Adapters entidad -> DTO (to_organization_res / to_contact_res).

Colaboradores:
    - domain.entities (Organization, Contact, ContactWithOrganization)

Notas:
    - Los patch usan model_dump(exclude_unset=True): un campo ausente no se
      toca; un null explícito sí se escribe.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.domain.entities import (
    ContactType,
    ContactWithOrganization,
    Organization,
    OrganizationType,
)

_OptionalEmail = Optional[Union[EmailStr, Literal[""]]]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def changes(self) -> dict[str, Any]:
        """Campos enviados por el cliente (snake_case) para los use cases."""
        return self.model_dump(exclude_unset=True)


# -----------------------------------------------------------------------------
# Organizations
# -----------------------------------------------------------------------------
class CreateOrganizationReq(_CamelModel):
    name_en: str = Field(..., alias="nameEn", min_length=1, max_length=300)
    name_ar: str = Field(..., alias="nameAr", min_length=1, max_length=300)
    tax_id: str | None = Field(default=None, alias="taxId")
    registration_number: str | None = Field(default=None, alias="registrationNumber")
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: _OptionalEmail = None
    notes: str | None = None


class UpdateOrganizationReq(_CamelModel):
    name_en: str | None = Field(default=None, alias="nameEn", min_length=1, max_length=300)
    name_ar: str | None = Field(default=None, alias="nameAr", min_length=1, max_length=300)
    tax_id: str | None = Field(default=None, alias="taxId")
    registration_number: str | None = Field(default=None, alias="registrationNumber")
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: _OptionalEmail = None
    notes: str | None = None


class OrganizationRes(_CamelModel):
    id: UUID
    name_en: str = Field(alias="nameEn")
    name_ar: str = Field(alias="nameAr")
    type: OrganizationType
    tax_id: str | None = Field(default=None, alias="taxId")
    registration_number: str | None = Field(default=None, alias="registrationNumber")
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None
    email: str | None = None
    is_active: bool = Field(alias="isActive")
    notes: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


def to_organization_res(organization: Organization) -> OrganizationRes:
    return OrganizationRes(
        id=organization.id,
        name_en=organization.name_en,
        name_ar=organization.name_ar,
        type=organization.type,
        tax_id=organization.tax_id,
        registration_number=organization.registration_number,
        address=organization.address,
        city=organization.city,
        country=organization.country,
        phone=organization.phone,
        email=organization.email,
        is_active=organization.is_active,
        notes=organization.notes,
        created_at=organization.created_at,
        updated_at=organization.updated_at,
    )


# -----------------------------------------------------------------------------
# Contacts
# -----------------------------------------------------------------------------
class CreateContactReq(_CamelModel):
    organization_id: UUID = Field(..., alias="organizationId")
    user_id: UUID | None = Field(default=None, alias="userId")
    name_en: str = Field(..., alias="nameEn", min_length=1, max_length=300)
    name_ar: str = Field(..., alias="nameAr", min_length=1, max_length=300)
    contact_type: ContactType = Field(..., alias="contactType")
    mobile: str | None = None
    email: _OptionalEmail = None
    nationality: str | None = None
    notes: str | None = None


class UpdateContactReq(_CamelModel):
    organization_id: UUID | None = Field(default=None, alias="organizationId")
    user_id: UUID | None = Field(default=None, alias="userId")
    name_en: str | None = Field(default=None, alias="nameEn", min_length=1, max_length=300)
    name_ar: str | None = Field(default=None, alias="nameAr", min_length=1, max_length=300)
    contact_type: ContactType | None = Field(default=None, alias="contactType")
    mobile: str | None = None
    email: _OptionalEmail = None
    nationality: str | None = None
    notes: str | None = None


class ContactRes(_CamelModel):
    id: UUID
    organization_id: UUID = Field(alias="organizationId")
    user_id: UUID | None = Field(default=None, alias="userId")
    name_en: str = Field(alias="nameEn")
    name_ar: str = Field(alias="nameAr")
    contact_type: ContactType = Field(alias="contactType")
    mobile: str | None = None
    email: str | None = None
    nationality: str | None = None
    is_active: bool = Field(alias="isActive")
    notes: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    organization: OrganizationRes | None = None


def to_contact_res(item: ContactWithOrganization) -> ContactRes:
    contact = item.contact
    return ContactRes(
        id=contact.id,
        organization_id=contact.organization_id,
        user_id=contact.user_id,
        name_en=contact.name_en,
        name_ar=contact.name_ar,
        contact_type=contact.contact_type,
        mobile=contact.mobile,
        email=contact.email,
        nationality=contact.nationality,
        is_active=contact.is_active,
        notes=contact.notes,
        created_at=contact.created_at,
        updated_at=contact.updated_at,
        organization=(
            to_organization_res(item.organization) if item.organization else None
        ),
    )
