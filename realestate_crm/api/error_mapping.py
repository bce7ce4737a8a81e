"""
===============================================================================
TARJETA CRC — api/error_mapping.py (UseCase Error -> HTTP RFC7807)
===============================================================================

Responsabilidades:
  - Traducir UserErrorCode a AppHTTPException RFC7807.
  - Loguear el motivo real (reason) antes de aplanar el mensaje.

Colaboradores:
  - application.usecases.UserError / UserErrorCode
  - crosscutting.error_responses
===============================================================================
"""

from __future__ import annotations

from ..application.usecases import UserError, UserErrorCode
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    conflict,
    forbidden,
    unauthorized,
    validation_error,
)
from ..crosscutting.logger import logger


def _to_http(error: UserError) -> AppHTTPException:
    errors = [{"field": error.field, "msg": error.message}] if error.field else None

    if error.code == UserErrorCode.MISSING_CREDENTIALS:
        return validation_error(error.message, code=ErrorCode.MISSING_CREDENTIALS)
    if error.code == UserErrorCode.INVALID_CREDENTIALS:
        return unauthorized(error.message, code=ErrorCode.INVALID_CREDENTIALS)
    if error.code == UserErrorCode.FORBIDDEN:
        return forbidden(error.message)
    if error.code == UserErrorCode.REAL_ESTATE_ACCESS_DENIED:
        return forbidden(error.message, code=ErrorCode.REAL_ESTATE_ACCESS_DENIED)
    if error.code == UserErrorCode.DUPLICATE_EMAIL:
        return conflict(error.message, code=ErrorCode.DUPLICATE_EMAIL)
    return validation_error(error.message, errors)


def raise_user_error(error: UserError) -> None:
    """Traduce UserError -> HTTP (siempre lanza)."""
    logger.warning(
        "Caso de uso rechazado",
        extra={"code": error.code.value, "reason": error.reason or error.message},
    )
    raise _to_http(error)
