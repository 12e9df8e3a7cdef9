"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/api.
    - Mantener estable el “surface area” del dominio.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import (
    Contact,
    ContactType,
    ContactWithOrganization,
    EmailVerificationToken,
    Organization,
    OrganizationType,
    SessionRecord,
)
from .repositories import (
    ContactRepository,
    OrganizationRepository,
    SessionRepository,
    UserRepository,
    VerificationTokenRepository,
)
from .services import NotificationService, TokenStore

__all__ = [
    # Entities
    "Organization",
    "OrganizationType",
    "Contact",
    "ContactType",
    "ContactWithOrganization",
    "EmailVerificationToken",
    "SessionRecord",
    # Repository Interfaces (Ports)
    "UserRepository",
    "SessionRepository",
    "VerificationTokenRepository",
    "OrganizationRepository",
    "ContactRepository",
    # Service Interfaces (Ports)
    "TokenStore",
    "NotificationService",
]
