"""
============================================================
TARJETA CRC
============================================================
Class: app.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres e InMemory)
  en un único punto de importación.

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (tests / local dev)
============================================================
"""

from .in_memory import (
    InMemoryContactRepository,
    InMemoryOrganizationRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
    InMemoryVerificationTokenRepository,
)
from .postgres import (
    PostgresContactRepository,
    PostgresOrganizationRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
    PostgresVerificationTokenRepository,
)

__all__ = [
    # Postgres
    "PostgresUserRepository",
    "PostgresSessionRepository",
    "PostgresVerificationTokenRepository",
    "PostgresOrganizationRepository",
    "PostgresContactRepository",
    # In-memory
    "InMemoryUserRepository",
    "InMemorySessionRepository",
    "InMemoryVerificationTokenRepository",
    "InMemoryOrganizationRepository",
    "InMemoryContactRepository",
]
