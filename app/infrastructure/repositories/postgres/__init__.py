"""
PostgreSQL Repository Implementations.

Raw parameterised SQL over psycopg 3 + psycopg_pool.
"""

from .contact import PostgresContactRepository
from .organization import PostgresOrganizationRepository
from .session import PostgresSessionRepository
from .user import PostgresUserRepository
from .verification_token import PostgresVerificationTokenRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresSessionRepository",
    "PostgresVerificationTokenRepository",
    "PostgresOrganizationRepository",
    "PostgresContactRepository",
]
