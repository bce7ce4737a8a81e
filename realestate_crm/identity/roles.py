"""
===============================================================================
TARJETA CRC — identity/roles.py
===============================================================================

Módulo:
    Jerarquía de roles (orden total)

Responsabilidades:
    - Asignar un rango entero a cada rol.
    - Responder “tiene rol X” como rank(actual) >= rank(X).
    - Resolver requisitos de “cualquiera de estos roles”.

Colaboradores:
    - identity/gate.py: chequeo de rol por ruta.
    - application/usecases/*: reglas de creación de usuarios.

Notas:
    - Funciones puras, sin I/O.
    - has_all_roles existe solo para documentar la variante legacy (ALL-of);
      el gate usa has_any_role.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable, Mapping

from .users import UserRole

ROLE_RANKS: Mapping[UserRole, int] = {
    UserRole.SUPER_ADMIN: 6,
    UserRole.ADMIN: 5,
    UserRole.SALES: 4,
    UserRole.MAINTENANCE: 3,
    UserRole.RECEPTIONIST: 2,
    UserRole.TENANT: 1,
}

GLOBAL_ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})


def rank(role: UserRole | str) -> int:
    """Rango del rol. ValueError si el rol no existe."""
    return ROLE_RANKS[UserRole(role)]


def has_role(actual: UserRole | str, required: UserRole | str) -> bool:
    return rank(actual) >= rank(required)


def has_any_role(actual: UserRole | str, required: Iterable[UserRole | str]) -> bool:
    """True si `actual` satisface al menos uno de los requeridos (lista vacía -> False)."""
    return any(has_role(actual, r) for r in required)


def has_all_roles(actual: UserRole | str, required: Iterable[UserRole | str]) -> bool:
    # Variante ALL-of: equivale a exigir el mayor rango de la lista.
    roles = list(required)
    return bool(roles) and all(has_role(actual, r) for r in roles)


def is_super_admin(role: UserRole | str) -> bool:
    return UserRole(role) == UserRole.SUPER_ADMIN


def is_global_admin(role: UserRole | str) -> bool:
    return UserRole(role) in GLOBAL_ADMIN_ROLES
