"""
Name: Create User Use Case

Responsibilities:
  - Validate the new user's fields (email format, password length, name)
  - Apply creation rules:
      * nobody creates super_admin through the API
      * only super_admin creates admin users
      * non super admins create users only inside their own real estate
      * real_estate_id defaults to the creator's
  - Reject duplicate emails without writing

Collaborators:
  - domain.repositories.UserRepository
  - identity.roles / identity.scoping
  - password hasher (argon2, injected)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ...crosscutting.exceptions import ConflictError
from ...crosscutting.logger import logger
from ...domain.repositories import NewUser, UserRepository
from ...identity.auth_users import normalize_email
from ...identity.roles import is_super_admin
from ...identity.scoping import can_access_tenant
from ...identity.tokens import UserContext
from ...identity.users import UserRole
from .user_results import UserError, UserErrorCode, UserResult

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
MAX_FULL_NAME_LENGTH = 100


@dataclass
class CreateUserInput:
    actor: UserContext
    email: str
    password: str
    full_name: str
    role: UserRole = UserRole.TENANT
    real_estate_id: str | None = None
    building_id: str | None = None
    phone: str | None = None
    avatar: str | None = None
    modules: Sequence[str] = field(default_factory=tuple)


def _invalid(message: str, field_name: str) -> UserResult:
    return UserResult(
        error=UserError(
            code=UserErrorCode.VALIDATION_ERROR, message=message, field=field_name
        )
    )


class CreateUserUseCase:
    """R: Create a user on behalf of an admin actor."""

    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: Callable[[str], str],
    ):
        self.user_repository = user_repository
        self.password_hasher = password_hasher

    def _validate(self, input_data: CreateUserInput, email: str) -> UserResult | None:
        if not email or not EMAIL_RE.match(email):
            return _invalid("Email inválido", "email")
        if len(input_data.password or "") < MIN_PASSWORD_LENGTH:
            return _invalid(
                f"El password debe tener al menos {MIN_PASSWORD_LENGTH} caracteres",
                "password",
            )
        full_name = (input_data.full_name or "").strip()
        if not full_name:
            return _invalid("El nombre completo es requerido", "fullName")
        if len(full_name) > MAX_FULL_NAME_LENGTH:
            return _invalid(
                f"El nombre no puede superar {MAX_FULL_NAME_LENGTH} caracteres",
                "fullName",
            )
        if input_data.role == UserRole.SUPER_ADMIN:
            return _invalid("No se puede crear un super admin", "role")
        return None

    def _authorize(self, input_data: CreateUserInput) -> UserResult | None:
        actor = input_data.actor
        if is_super_admin(actor.role):
            return None
        if input_data.role == UserRole.ADMIN:
            return UserResult(
                error=UserError(
                    code=UserErrorCode.FORBIDDEN,
                    message="Solo un super admin puede crear administradores",
                    reason=f"{actor.role.value} tried to create admin",
                )
            )
        if not can_access_tenant(actor, input_data.real_estate_id):
            return UserResult(
                error=UserError(
                    code=UserErrorCode.REAL_ESTATE_ACCESS_DENIED,
                    message="No puede crear usuarios en otra inmobiliaria",
                    reason=f"target real_estate {input_data.real_estate_id}",
                )
            )
        return None

    def execute(self, input_data: CreateUserInput) -> UserResult:
        email = normalize_email(input_data.email)

        failure = self._validate(input_data, email) or self._authorize(input_data)
        if failure is not None:
            return failure

        duplicate = UserResult(
            error=UserError(
                code=UserErrorCode.DUPLICATE_EMAIL,
                message="Ya existe un usuario con ese email",
                field="email",
            )
        )
        if self.user_repository.get_user_by_email(email) is not None:
            return duplicate

        new_user = NewUser(
            email=email,
            password_hash=self.password_hasher(input_data.password),
            full_name=input_data.full_name.strip(),
            role=input_data.role,
            real_estate_id=input_data.real_estate_id or input_data.actor.real_estate_id,
            building_id=input_data.building_id,
            phone=(input_data.phone or "").strip() or None,
            avatar=input_data.avatar,
            modules=tuple(input_data.modules),
        )
        try:
            user = self.user_repository.create_user(new_user)
        except ConflictError:
            # R: carrera entre el chequeo y el insert; el store es la autoridad.
            return duplicate

        logger.info(
            "Usuario creado",
            extra={
                "user_id": str(user.id),
                "role": user.role.value,
                "created_by": str(input_data.actor.user_id),
            },
        )
        return UserResult(user=user)
