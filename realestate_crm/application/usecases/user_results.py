"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Proveer modelos compartidos de resultados y errores para los casos de uso
    de autenticación y gestión de usuarios.

Why (Context / Intención):
    - Los use cases devuelven resultados tipados en lugar de lanzar excepciones
      hacia afuera; la API traduce el código a HTTP (api/error_mapping.py).
    - Un set acotado de códigos evita mensajes inconsistentes.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Responsibilities:
    - UserErrorCode: categorías estables de error.
    - UserError: code + message (cliente) + reason (logs).
    - LoginResult / UserResult / UserListResult.
Collaborators:
    - identity.users.User
    - crosscutting.pagination.PaginationMeta
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ...crosscutting.pagination import PaginationMeta
from ...identity.users import User


class UserErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"
    REAL_ESTATE_ACCESS_DENIED = "REAL_ESTATE_ACCESS_DENIED"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"


@dataclass(frozen=True)
class UserError:
    code: UserErrorCode
    message: str
    reason: str | None = None
    field: str | None = None


@dataclass
class LoginResult:
    user: User | None = None
    token: str | None = None
    expires_in: int | None = None
    error: UserError | None = None


@dataclass
class UserResult:
    user: User | None = None
    error: UserError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    pagination: PaginationMeta | None = None
    error: UserError | None = None
