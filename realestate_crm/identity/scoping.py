"""
===============================================================================
TARJETA CRC — identity/scoping.py
===============================================================================

Módulo:
    Scoping multi-tenant (inmobiliaria) y por edificio

Responsabilidades:
    - Decidir si un sujeto puede operar sobre un real_estate_id destino.
    - Decidir si un sujeto puede operar sobre un building_id destino.

Colaboradores:
    - identity/gate.py (scope check por ruta)
    - application/usecases/create_user.py

Reglas:
    - Tenant: override solo para super_admin; destino ausente -> permitido.
    - Building: override para super_admin y admin; destino ausente -> permitido.
    - No se valida que el destino exista (eso es responsabilidad del caller).
===============================================================================
"""

from __future__ import annotations

from typing import Protocol

from .roles import is_global_admin, is_super_admin
from .users import UserRole


class ScopedSubject(Protocol):
    """Forma mínima: UserContext y User la cumplen."""

    role: UserRole
    real_estate_id: str | None
    building_id: str | None


def can_access_tenant(subject: ScopedSubject, target_real_estate_id: str | None) -> bool:
    if is_super_admin(subject.role):
        return True
    if not target_real_estate_id:
        return True
    return subject.real_estate_id == target_real_estate_id


def can_access_building(subject: ScopedSubject, target_building_id: str | None) -> bool:
    if is_global_admin(subject.role):
        return True
    if not target_building_id:
        return True
    return subject.building_id == target_building_id
