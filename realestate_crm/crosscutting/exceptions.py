"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (lo consume el cliente)
- status_code HTTP sugerido
- message “humana” para el cliente (sin filtrar detalles)
- reason solo para logs del servidor
- error_id para correlación con logs

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  CRMError + subclases

Responsabilidades:
  - Estandarizar errores internos que luego se mapean a HTTP (RFC 7807)
  - Separar mensaje al cliente (genérico) del motivo real (logs)
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a problem+json)
  - identity/tokens.py, identity/gate.py, identity/auth_users.py
  - infrastructure/repositories/* (DatabaseError, ConflictError)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class CRMError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      CRMError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + status_code + error_id + message + reason

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500
    default_message: str = "Ocurrió un error inesperado"

    def __init__(
        self,
        message: str | None = None,
        *,
        reason: str | None = None,
        error_code: str | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message or self.default_message
        # R: reason nunca viaja al cliente; solo a logs.
        self.reason = reason or self.message
        if error_code:
            self.error_code = error_code
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(self.message)


class ValidationError(CRMError):
    """Input inválido o incompleto."""

    error_code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Datos inválidos"


class AuthenticationError(CRMError):
    """Identidad no establecida (401)."""

    error_code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Autenticación requerida"


class MissingTokenError(AuthenticationError):
    error_code = "MISSING_TOKEN"
    default_message = "Falta token de acceso"


class InvalidTokenError(AuthenticationError):
    """Token con firma, expiración, issuer, audience o claims inválidos."""

    error_code = "INVALID_TOKEN"
    default_message = "Token inválido o expirado"


class InvalidCredentialsError(AuthenticationError):
    """Email inexistente, password incorrecto o cuenta inactiva (mismo mensaje)."""

    error_code = "INVALID_CREDENTIALS"
    default_message = "Credenciales inválidas"


class AuthorizationError(CRMError):
    """Identidad válida pero sin permisos (403)."""

    error_code = "INSUFFICIENT_PERMISSIONS"
    status_code = 403
    default_message = "Permisos insuficientes"


class ConflictError(CRMError):
    error_code = "CONFLICT"
    status_code = 409
    default_message = "El recurso ya existe"


class RateLimitError(CRMError):
    error_code = "RATE_LIMITED"
    status_code = 429
    default_message = "Demasiadas solicitudes"

    def __init__(self, retry_after: int = 60, **kwargs):
        self.retry_after = max(1, int(retry_after))
        kwargs.setdefault(
            "message",
            f"Demasiadas solicitudes. Reintentá en {self.retry_after}s",
        )
        super().__init__(**kwargs)


class UnexpectedError(CRMError):
    """Fallo no clasificado (500)."""


class DatabaseError(CRMError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code = "DATABASE_ERROR"
    status_code = 500
    default_message = "Falla en operación de base de datos"


class ConfigurationError(CRMError):
    """Configuración inválida; se detecta al arrancar y es fatal."""

    error_code = "CONFIGURATION_ERROR"
    status_code = 500
    default_message = "Configuración inválida"
