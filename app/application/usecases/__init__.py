"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
├── auth/           # Login, change password
├── users/          # Admin user management
├── verification/   # Email verification tokens
├── notifications/  # Welcome email
└── organizations/  # Partners, company, contacts

Usage
-----
    from app.application.usecases.users import CreateUserUseCase
    from app.application.usecases import ServiceError, ServiceErrorKind
"""

from .results import (
    CommandResult,
    ContactListResult,
    ContactResult,
    CreatedUserResult,
    OrganizationListResult,
    OrganizationResult,
    ResetPasswordResult,
    ServiceError,
    ServiceErrorKind,
    UserListResult,
    UserResult,
    VerificationResult,
)

__all__ = [
    "ServiceError",
    "ServiceErrorKind",
    "UserResult",
    "CreatedUserResult",
    "ResetPasswordResult",
    "UserListResult",
    "VerificationResult",
    "CommandResult",
    "OrganizationResult",
    "OrganizationListResult",
    "ContactResult",
    "ContactListResult",
]
