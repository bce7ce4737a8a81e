"""
Name: List Users Use Case

Responsibilities:
  - Page through users with optional role / active / search filters
  - Enforce tenant scoping: only super_admin can see other real estates

Collaborators:
  - domain.repositories.UserRepository
  - identity.roles.is_super_admin
  - crosscutting.pagination.PageRequest
"""

from __future__ import annotations

from dataclasses import dataclass

from ...crosscutting.pagination import PageRequest
from ...domain.repositories import UserFilters, UserRepository
from ...identity.roles import is_super_admin
from ...identity.tokens import UserContext
from ...identity.users import UserRole
from .user_results import UserListResult


@dataclass
class ListUsersInput:
    actor: UserContext
    page: int = 1
    limit: int = 10
    role: UserRole | None = None
    is_active: bool | None = None
    search: str | None = None
    real_estate_id: str | None = None


class ListUsersUseCase:
    """R: List users visible to the actor."""

    def __init__(self, user_repository: UserRepository, max_limit: int = 100):
        self.user_repository = user_repository
        self.max_limit = max_limit

    def _filters(self, input_data: ListUsersInput) -> UserFilters:
        search = (input_data.search or "").strip() or None
        if is_super_admin(input_data.actor.role):
            return UserFilters(
                real_estate_id=input_data.real_estate_id,
                role=input_data.role,
                is_active=input_data.is_active,
                search=search,
            )
        # R: non super admins are pinned to their own real estate (None included).
        return UserFilters(
            real_estate_id=input_data.actor.real_estate_id,
            scope_to_real_estate=True,
            role=input_data.role,
            is_active=input_data.is_active,
            search=search,
        )

    def execute(self, input_data: ListUsersInput) -> UserListResult:
        page = PageRequest.build(
            input_data.page, input_data.limit, max_limit=self.max_limit
        )
        filters = self._filters(input_data)

        users = self.user_repository.list_users(
            filters=filters, limit=page.limit, offset=page.offset
        )
        total = self.user_repository.count_users(filters=filters)
        return UserListResult(users=users, pagination=page.meta(total))
