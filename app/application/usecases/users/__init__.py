from .create_user import CreateUserUseCase, normalize_email
from .list_users import ListUsersUseCase
from .reset_password import ResetUserPasswordUseCase
from .update_user import UpdateUserUseCase

__all__ = [
    "CreateUserUseCase",
    "UpdateUserUseCase",
    "ResetUserPasswordUseCase",
    "ListUsersUseCase",
    "normalize_email",
]
