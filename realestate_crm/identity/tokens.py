"""
===============================================================================
TARJETA CRC — identity/tokens.py
===============================================================================

Módulo:
    Emisión y verificación de JWT de acceso

Responsabilidades:
    - Emitir un JWT firmado (HS256) a partir de un usuario verificado.
    - Verificar firma, expiración, issuer, audience y claims mínimos.
    - Construir UserContext: es el ÚNICO lugar donde se crea.

Colaboradores:
    - crosscutting.config.get_settings: secreto, TTL, issuer/audience.
    - crosscutting.exceptions: InvalidTokenError / ConfigurationError.
    - crosscutting.logger: motivo real del rechazo (solo server-side).
    - identity.users: User / UserRole.

Decisiones de diseño:
    - Claims = proyección pura del usuario al momento de emitir; pueden quedar
      desactualizados hasta expirar (no hay lista de revocación).
    - Todos los rechazos devuelven el mismo mensaje al cliente.
    - No loguear tokens ni secretos.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from ..crosscutting.config import JWT_AUDIENCE, JWT_ISSUER, get_settings
from ..crosscutting.exceptions import ConfigurationError, InvalidTokenError
from ..crosscutting.logger import logger
from .users import User, UserRole

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_REAL_ESTATE_ID: str = "real_estate_id"
CLAIM_BUILDING_ID: str = "building_id"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_ISS: str = "iss"
CLAIM_AUD: str = "aud"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

_REQUIRED_CLAIMS = [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_IAT, CLAIM_EXP, CLAIM_ISS, CLAIM_AUD]


# ---------------------------------------------------------------------------
# Contratos
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """Settings de tokens (snapshot)."""

    secret: str
    ttl_seconds: int
    issuer: str = JWT_ISSUER
    audience: str = JWT_AUDIENCE


@dataclass(frozen=True, slots=True)
class UserContext:
    """Identidad verificada del request (solo lectura)."""

    user_id: UUID
    email: str
    role: UserRole
    real_estate_id: str | None
    building_id: str | None
    issued_at: datetime
    expires_at: datetime


def get_token_settings() -> TokenSettings:
    """Construye un snapshot de settings de tokens."""
    s = get_settings()
    return TokenSettings(secret=s.jwt_secret, ttl_seconds=s.jwt_ttl_seconds)


def _require_secret(settings: TokenSettings) -> str:
    secret = (settings.secret or "").strip()
    if not secret:
        raise ConfigurationError("JWT_SECRET is required")
    return secret


# ---------------------------------------------------------------------------
# Emisión
# ---------------------------------------------------------------------------


def issue_access_token(
    user: User,
    settings: TokenSettings | None = None,
    *,
    now: datetime | None = None,
) -> tuple[str, int]:
    """Crea un JWT de acceso firmado.

    Retorna:
        (token, expires_in_seconds)
    """
    token_settings = settings or get_token_settings()
    secret = _require_secret(token_settings)

    issued = now or datetime.now(timezone.utc)
    expires_in = int(token_settings.ttl_seconds)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_ROLE: user.role.value,
        CLAIM_REAL_ESTATE_ID: user.real_estate_id,
        CLAIM_BUILDING_ID: user.building_id,
        CLAIM_IAT: int(issued.timestamp()),
        CLAIM_EXP: int((issued + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_ISS: token_settings.issuer,
        CLAIM_AUD: token_settings.audience,
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


# ---------------------------------------------------------------------------
# Verificación
# ---------------------------------------------------------------------------


def _reject(reason: str, exc: Exception | None = None) -> InvalidTokenError:
    logger.warning("Token rechazado", extra={"reason": reason})
    return InvalidTokenError(reason=reason, original_error=exc)


def verify_access_token(
    token: str, settings: TokenSettings | None = None
) -> UserContext:
    """Verifica un JWT de acceso y devuelve el UserContext.

    Orden: estructura/firma -> expiración -> issuer/audience -> claims.

    Errores:
        InvalidTokenError (401) para cualquier rechazo; el motivo va a logs.
    """
    token_settings = settings or get_token_settings()
    secret = _require_secret(token_settings)

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            audience=token_settings.audience,
            issuer=token_settings.issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        raise _reject("expired", exc) from exc
    except jwt.InvalidAudienceError as exc:
        raise _reject("wrong_audience", exc) from exc
    except jwt.InvalidIssuerError as exc:
        raise _reject("wrong_issuer", exc) from exc
    except jwt.MissingRequiredClaimError as exc:
        raise _reject(f"missing_claim:{exc.claim}", exc) from exc
    except jwt.InvalidSignatureError as exc:
        raise _reject("bad_signature", exc) from exc
    except jwt.InvalidTokenError as exc:
        raise _reject("malformed", exc) from exc

    if payload.get(CLAIM_TYP, TOKEN_TYPE_ACCESS) != TOKEN_TYPE_ACCESS:
        raise _reject("wrong_token_type")

    try:
        user_id = UUID(str(payload[CLAIM_SUB]))
        role = UserRole(str(payload[CLAIM_ROLE]))
    except ValueError as exc:
        raise _reject("bad_subject_or_role", exc) from exc

    return UserContext(
        user_id=user_id,
        email=str(payload[CLAIM_EMAIL]),
        role=role,
        real_estate_id=payload.get(CLAIM_REAL_ESTATE_ID) or None,
        building_id=payload.get(CLAIM_BUILDING_ID) or None,
        issued_at=datetime.fromtimestamp(payload[CLAIM_IAT], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload[CLAIM_EXP], tz=timezone.utc),
    )
