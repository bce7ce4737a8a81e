"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de usuarios (credenciales)

Responsabilidades:
    - Hashear/verificar passwords (Argon2).
    - Autenticar email + password contra el Credential Store.
    - Extraer el token desde `Authorization: Bearer <token>`.

Colaboradores:
    - domain.repositories.UserRepository: lookup por email.
    - crosscutting.exceptions.InvalidCredentialsError.
    - crosscutting.logger: motivo real del rechazo.

Decisiones de diseño:
    - Email inexistente, password incorrecto y cuenta inactiva responden igual
      (INVALID_CREDENTIALS); el motivo solo queda en logs.
    - Si el email no existe igual se verifica contra un hash dummy para no
      revelar existencia por timing.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..crosscutting.exceptions import InvalidCredentialsError
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from .users import User

_password_hasher = PasswordHasher()


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-timing")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def authenticate_user(user_repo: UserRepository, email: str, password: str) -> User:
    """Valida credenciales y retorna el usuario activo.

    Errores:
        InvalidCredentialsError para cualquier fallo (sin diferenciar causa).
    """
    normalized_email = normalize_email(email)

    user = user_repo.get_user_by_email(normalized_email) if normalized_email else None
    if user is None:
        verify_password(password, _dummy_hash())
        logger.warning("Auth falló: usuario inexistente", extra={"email": normalized_email})
        raise InvalidCredentialsError(reason="unknown_email")

    if not verify_password(password, user.password_hash):
        logger.warning("Auth falló: password incorrecto", extra={"user_id": str(user.id)})
        raise InvalidCredentialsError(reason="bad_password")

    if not user.is_active:
        logger.warning("Auth falló: usuario inactivo", extra={"user_id": str(user.id)})
        raise InvalidCredentialsError(reason="inactive_account")

    return user


# ---------------------------------------------------------------------------
# Extracción de token
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
