"""
Name: Repository Interfaces (Ports)

Responsibilities:
  - Define contracts for user persistence (Credential Store)
  - Define contracts for audit event recording
  - Keep use cases independent of storage technology

Collaborators:
  - infrastructure.repositories.postgres.user: PostgresUserRepository
  - infrastructure.repositories.in_memory.*: test/dev adapters
  - application.usecases.*: consume these protocols

Notes:
  - Protocols (structural typing), no inheritance required
  - Email lookups expect an already-normalized (trimmed, lower-cased) email
  - create_user raises ConflictError on duplicate email
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence
from uuid import UUID

from ..identity.users import User, UserRole
from .audit import AuditEvent


@dataclass(frozen=True)
class UserFilters:
    """
    R: Filters for user listings.

    scope_to_real_estate=True restricts results to real_estate_id, including
    the None case (users without a real estate).
    """

    real_estate_id: str | None = None
    scope_to_real_estate: bool = False
    role: UserRole | None = None
    is_active: bool | None = None
    search: str | None = None


@dataclass(frozen=True)
class NewUser:
    """R: Data required to persist a user (password already hashed)."""

    email: str
    password_hash: str
    full_name: str
    role: UserRole = UserRole.TENANT
    real_estate_id: str | None = None
    building_id: str | None = None
    phone: str | None = None
    avatar: str | None = None
    is_active: bool = True
    modules: Sequence[str] = ()


class UserRepository(Protocol):
    """R: Interface for the user Credential Store."""

    def get_user_by_email(self, email: str) -> User | None:
        """R: Fetch user by normalized email."""
        ...

    def get_user_by_id(self, user_id: UUID) -> User | None:
        """R: Fetch user by id."""
        ...

    def list_users(
        self, *, filters: UserFilters, limit: int, offset: int
    ) -> list[User]:
        """R: List users matching filters, newest first."""
        ...

    def count_users(self, *, filters: UserFilters) -> int:
        """R: Count users matching filters."""
        ...

    def create_user(self, new_user: NewUser) -> User:
        """R: Persist a user. Raises ConflictError on duplicate email."""
        ...

    def update_user(
        self,
        user_id: UUID,
        *,
        password_hash: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> User | None:
        """R: Update admin-managed fields. Returns None if user not found."""
        ...

    def ping(self) -> bool:
        """R: Round-trip to the store (health check)."""
        ...


class AuditEventRepository(Protocol):
    """R: Interface for audit event recording."""

    def record_event(self, event: AuditEvent) -> None:
        """R: Record an audit event."""
        ...
