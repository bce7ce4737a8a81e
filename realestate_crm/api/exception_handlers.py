"""
===============================================================================
TARJETA CRC — api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir excepciones internas (CRMError) a respuestas RFC7807.
  - Mapear errores de validación de FastAPI a 400 VALIDATION_ERROR.
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos (stack traces solo en logs).

Patrones aplicados:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: cualquier excepción no tipada -> INTERNAL_ERROR (con logging).

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: CRMError y derivadas
  - crosscutting.logger: logger / error_logger
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    internal_error,
)
from ..crosscutting.exceptions import CRMError, RateLimitError
from ..crosscutting.logger import error_logger, logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _error_code(value: str) -> ErrorCode:
    try:
        return ErrorCode(value)
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    """CRMError -> RFC7807 con el status/código de la excepción."""
    request_id = _request_id_from(request)
    extra = {
        "code": exc.error_code,
        "error_id": exc.error_id,
        "reason": exc.reason,
        "request_id": request_id,
    }

    if exc.status_code >= 500:
        error_logger.error(
            "Error interno",
            exc_info=exc.original_error or exc,
            extra=extra,
        )
    else:
        logger.warning("Request rechazado", extra=extra)

    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}

    errors = [{"error_id": exc.error_id}] if exc.status_code >= 500 else None
    app_exc = AppHTTPException(
        status_code=exc.status_code,
        code=_error_code(exc.error_code),
        detail=exc.message,
        errors=errors,
        headers=headers,
    )
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body/query inválidos -> 400 VALIDATION_ERROR con detalle por campo."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "msg": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=400,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Datos inválidos",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace) en el canal de errores.
    - Respuesta genérica (evita filtrar internos).
    """
    request_id = _request_id_from(request)

    error_logger.error(
        "Excepción no controlada",
        exc_info=exc,
        extra={"request_id": request_id, "error": str(exc)},
    )

    return await app_exception_handler(request, internal_error())


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - AppHTTPException debe registrarse para respetar RFC7807.
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(CRMError, crm_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
