"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Replicar la semántica del repo Postgres: unicidad de email
    case-insensitive, filtros y ordering (created_at DESC, id DESC).

Collaborators:
  - identity.users.User / UserRole
  - domain.repositories.UserRepository (contrato a implementar)
  - crosscutting.exceptions.ConflictError

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock (check + insert atómico).
  - User es inmutable: los updates reemplazan la instancia.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ....crosscutting.exceptions import ConflictError
from ....domain.repositories import NewUser, UserFilters
from ....identity.users import User, UserRole


class InMemoryUserRepository:
    """Repositorio in-memory, thread-safe, para usuarios."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[UUID, User] = {}
        self._ids_by_email: Dict[str, UUID] = {}

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _matches(user: User, filters: UserFilters) -> bool:
        if filters.scope_to_real_estate:
            if user.real_estate_id != filters.real_estate_id:
                return False
        elif filters.real_estate_id and user.real_estate_id != filters.real_estate_id:
            return False
        if filters.role is not None and user.role != filters.role:
            return False
        if filters.is_active is not None and user.is_active != filters.is_active:
            return False
        if filters.search:
            needle = filters.search.strip().lower()
            if needle not in user.email.lower() and needle not in user.full_name.lower():
                return False
        return True

    def _filtered(self, filters: UserFilters) -> List[User]:
        items = [u for u in self._users.values() if self._matches(u, filters)]
        # R: mismo orden que Postgres: created_at DESC, id DESC
        return sorted(
            items, key=lambda u: (u.created_at or self._now(), str(u.id)), reverse=True
        )

    # --- Lectura ---
    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user_id = self._ids_by_email.get((email or "").strip().lower())
            return self._users.get(user_id) if user_id else None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(
        self, *, filters: UserFilters, limit: int, offset: int
    ) -> List[User]:
        if limit <= 0:
            return []
        with self._lock:
            start = max(0, offset)
            return self._filtered(filters)[start : start + limit]

    def count_users(self, *, filters: UserFilters) -> int:
        with self._lock:
            return len(self._filtered(filters))

    # --- Escritura ---
    def create_user(self, new_user: NewUser) -> User:
        email_key = new_user.email.strip().lower()
        now = self._now()
        with self._lock:
            if email_key in self._ids_by_email:
                raise ConflictError(
                    "El email ya existe",
                    error_code="DUPLICATE_EMAIL",
                    reason=f"duplicate email {email_key}",
                )
            user = User(
                id=uuid4(),
                email=email_key,
                password_hash=new_user.password_hash,
                full_name=new_user.full_name,
                role=new_user.role,
                real_estate_id=new_user.real_estate_id,
                building_id=new_user.building_id,
                phone=new_user.phone,
                avatar=new_user.avatar,
                is_active=new_user.is_active,
                modules=tuple(new_user.modules),
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._ids_by_email[email_key] = user.id
            return user

    def update_user(
        self,
        user_id: UUID,
        *,
        password_hash: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            changes: dict[str, object] = {}
            if password_hash is not None:
                changes["password_hash"] = password_hash
            if role is not None:
                changes["role"] = role
            if is_active is not None:
                changes["is_active"] = is_active
            if not changes:
                return user
            updated = replace(user, updated_at=self._now(), **changes)
            self._users[user_id] = updated
            return updated

    def ping(self) -> bool:
        return True

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._ids_by_email.clear()
