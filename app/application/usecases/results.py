"""
===============================================================================
USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Modelos compartidos de resultados y errores para todos los casos de uso
    (usuarios, verificación de email, notificaciones, organizaciones).

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de lanzar
      excepciones “hacia afuera”.
    - La API traduce ServiceErrorKind -> HTTP en UN solo lugar
      (interfaces/api/http/error_mapping.py); nunca se compara el texto del mensaje.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Component:
    results (module)

Responsibilities:
    - ServiceErrorKind: conjunto cerrado de categorías de error.
    - ServiceError: (kind + message).
    - Resultados por forma de respuesta (entidad, listado, comando).

Collaborators:
    - identity.users.User
    - domain.entities.Organization / ContactWithOrganization
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List
from uuid import UUID

from ...domain.entities import ContactWithOrganization, Organization
from ...identity.users import User


class ServiceErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class ServiceError:
    kind: ServiceErrorKind
    message: str


def validation(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.VALIDATION, message)


def unauthorized(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.UNAUTHORIZED, message)


def not_found(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.NOT_FOUND, message)


def conflict(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.CONFLICT, message)


def rate_limited(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.RATE_LIMITED, message)


def internal(message: str) -> ServiceError:
    return ServiceError(ServiceErrorKind.INTERNAL, message)


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


@dataclass
class UserResult:
    user: User | None = None
    error: ServiceError | None = None


@dataclass
class CreatedUserResult:
    """Alta de usuario: la contraseña temporal se devuelve UNA sola vez."""

    user: User | None = None
    temp_password: str | None = None
    error: ServiceError | None = None


@dataclass
class ResetPasswordResult:
    user_id: UUID | None = None
    temp_password: str | None = None
    error: ServiceError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    total: int = 0


# -----------------------------------------------------------------------------
# Email verification / notificaciones
# -----------------------------------------------------------------------------


@dataclass
class VerificationResult:
    success: bool
    message: str
    user_id: UUID | None = None
    error: ServiceError | None = None


@dataclass
class CommandResult:
    """Comandos sin payload (delete, send-welcome)."""

    ok: bool = False
    error: ServiceError | None = None


# -----------------------------------------------------------------------------
# Organizations / contacts
# -----------------------------------------------------------------------------


@dataclass
class OrganizationResult:
    organization: Organization | None = None
    error: ServiceError | None = None


@dataclass
class OrganizationListResult:
    organizations: List[Organization] = field(default_factory=list)
    total: int = 0


@dataclass
class ContactResult:
    contact: ContactWithOrganization | None = None
    error: ServiceError | None = None


@dataclass
class ContactListResult:
    contacts: List[ContactWithOrganization] = field(default_factory=list)
    total: int = 0
