"""
===============================================================================
TARJETA CRC — api/schemas.py (DTOs HTTP compartidos)
===============================================================================

Responsabilidades:
  - Definir el contrato JSON (camelCase) de la API.
  - Convertir User -> UserResponse sin exponer password_hash.

Colaboradores:
  - identity.users.User / UserRole
  - api/auth_routes.py, api/user_routes.py
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..identity.users import User, UserRole


class CamelModel(BaseModel):
    """Base: acepta snake_case o camelCase; serializa camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    id: UUID
    email: str
    full_name: str
    role: UserRole
    real_estate_id: str | None = None
    building_id: str | None = None
    phone: str | None = None
    avatar: str | None = None
    is_active: bool
    modules: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


def to_user_response(user: User) -> UserResponse:
    """Convierte entidad de usuario a DTO de respuesta (sin hash)."""
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        real_estate_id=user.real_estate_id,
        building_id=user.building_id,
        phone=user.phone,
        avatar=user.avatar,
        is_active=user.is_active,
        modules=list(user.modules),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
