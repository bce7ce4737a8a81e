"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario

Responsabilidades:
    - Definir el enum de roles (seis roles fijos del CRM).
    - Definir el dataclass User (registro del Credential Store).
    - Mantener el contrato de datos de auth centralizado y estable.

Colaboradores:
    - identity/roles.py: jerarquía sobre UserRole.
    - identity/tokens.py: proyecta User -> claims del JWT.
    - infrastructure/repositories/*: mapean filas -> User.

Notas:
    - Este módulo NO contiene lógica de negocio: solo “shapes” de datos.
    - password_hash nunca se serializa hacia afuera (ver api/schemas.py).
    - modules es informativo: el gate NO lo usa para autorizar.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """Roles del CRM (un usuario tiene exactamente uno)."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    SALES = "sales"
    MAINTENANCE = "maintenance"
    RECEPTIONIST = "receptionist"
    TENANT = "tenant"


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario persistido."""

    id: UUID
    email: str
    password_hash: str
    full_name: str
    role: UserRole = UserRole.TENANT
    real_estate_id: str | None = None
    building_id: str | None = None
    phone: str | None = None
    avatar: str | None = None
    is_active: bool = True
    modules: tuple[str, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    updated_at: datetime | None = None
