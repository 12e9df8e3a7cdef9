"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .contact import InMemoryContactRepository
from .organization import InMemoryOrganizationRepository
from .session import InMemorySessionRepository
from .user import InMemoryUserRepository
from .verification_token import InMemoryVerificationTokenRepository

__all__ = [
    "InMemoryUserRepository",
    "InMemorySessionRepository",
    "InMemoryVerificationTokenRepository",
    "InMemoryOrganizationRepository",
    "InMemoryContactRepository",
]
