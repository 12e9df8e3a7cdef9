"""
USE CASE: List Users (admin)

Listado completo (más nuevos primero) y paginado con filtros por rol y
búsqueda (email / nombre).
"""

from __future__ import annotations

from ....crosscutting.pagination import PageParams, resolve_sort
from ....domain.repositories import UserRepository
from ....identity.users import UserRole
from ..results import UserListResult

# R: sortBy (wire, camelCase) -> columna.
USER_SORT_FIELDS = {
    "createdAt": "created_at",
    "username": "username",
    "fullName": "full_name",
    "role": "role",
    "lastLoginAt": "last_login_at",
}
DEFAULT_USER_SORT = "createdAt"


class ListUsersUseCase:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def execute(self) -> UserListResult:
        users = self._users.list_users()
        return UserListResult(users=users, total=len(users))

    def execute_page(
        self,
        params: PageParams,
        *,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> UserListResult:
        sort_field = resolve_sort(params.sort_by, USER_SORT_FIELDS, DEFAULT_USER_SORT)
        users, total = self._users.list_users_page(
            params,
            sort_field=sort_field,
            role=role,
            search=(search or "").strip() or None,
        )
        return UserListResult(users=users, total=total)
