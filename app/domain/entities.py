"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (Organization, Contact, EmailVerificationToken, Session)

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Brindar helpers mínimos para invariantes simples (expiración, consumo).

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - application/usecases: construyen/consumen estas entidades.
    - api/*_routes.py: serializan DTOs basados en estas entidades.

Principios:
    - Sin dependencias a DB/Redis/FastAPI.
    - User vive en identity/users.py (borde de identidad).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID


def _utcnow() -> datetime:
    """Fecha/hora UTC (helper interno)."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Organizations (empresa propia + partners)
# ---------------------------------------------------------------------------


class OrganizationType(str, Enum):
    COMPANY = "COMPANY"
    PARTNER = "PARTNER"


@dataclass
class Organization:
    """
    Organización (bilingüe EN/AR).

    Invariante:
      - Existe a lo sumo una organización de tipo COMPANY.
    """

    id: UUID
    name_en: str
    name_ar: str
    type: OrganizationType
    tax_id: Optional[str] = None
    registration_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------


class ContactType(str, Enum):
    DRIVER = "DRIVER"
    STAFF = "STAFF"
    MANAGER = "MANAGER"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"
    SALES = "SALES"
    ACCOUNTANT = "ACCOUNTANT"
    OTHER = "OTHER"


@dataclass
class Contact:
    """
    Persona de contacto de una organización.

    Invariante:
      - Un usuario puede estar vinculado a lo sumo a un contacto.
    """

    id: UUID
    organization_id: UUID
    name_en: str
    name_ar: str
    contact_type: ContactType
    user_id: Optional[UUID] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    nationality: Optional[str] = None
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ContactWithOrganization:
    contact: Contact
    organization: Optional[Organization]


# ---------------------------------------------------------------------------
# Email verification
# ---------------------------------------------------------------------------


@dataclass
class EmailVerificationToken:
    """
    Token opaco de verificación de email (uso único).

    Aceptable solo si: no expiró y verified_at es None.
    """

    id: UUID
    user_id: UUID
    token: str
    expires_at: datetime
    created_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None

    def is_consumable(self, now: datetime | None = None) -> bool:
        now = now or _utcnow()
        return self.verified_at is None and self.expires_at > now


# ---------------------------------------------------------------------------
# Sessions (server-side)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionRecord:
    sid: str
    user_id: UUID
    expires_at: datetime
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or _utcnow())
