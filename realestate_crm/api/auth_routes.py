"""
===============================================================================
TARJETA CRC — api/auth_routes.py (Login)
===============================================================================

Responsabilidades:
  - Exponer POST /auth/login (email + password -> JWT).
  - Limitar intentos por cliente (ventana fija) antes de tocar el store.
  - Emitir eventos de auditoría (best-effort) para éxito y rechazo.

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP ↔ caso de uso.
  - Fail-safe security: cualquier fallo de credenciales es 401 genérico.
  - Best-effort audit: auditoría no debe romper el flujo principal.

Colaboradores:
  - application.usecases.LoginUseCase
  - crosscutting.rate_limit.FixedWindowRateLimiter
  - audit.emit_audit_event
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import Field

from ..application.usecases import LoginInput, LoginUseCase
from ..audit import emit_audit_event
from ..container import get_audit_repository, get_login_rate_limiter, get_login_use_case
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.exceptions import RateLimitError
from ..crosscutting.logger import logger
from ..crosscutting.rate_limit import (
    FixedWindowRateLimiter,
    get_client_identifier,
    retry_after_header,
)
from ..domain.audit import AuditDecision
from ..domain.repositories import AuditEventRepository
from .error_mapping import raise_user_error
from .schemas import CamelModel, UserResponse, to_user_response

router = APIRouter(prefix="/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)

LOGIN_AUDIT_ACTION = "auth.login"


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class LoginRequest(CamelModel):
    # R: opcionales para responder MISSING_CREDENTIALS (400) en vez de 422.
    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, max_length=512)


class LoginResponse(CamelModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserResponse


# -----------------------------------------------------------------------------
# Dependencias
# -----------------------------------------------------------------------------


def enforce_login_rate_limit(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_login_rate_limiter),
) -> None:
    """Cuenta el intento; 429 + Retry-After al superar el límite."""
    key = get_client_identifier(request)
    allowed, retry_after = limiter.consume(key)
    if not allowed:
        logger.warning("Login rate limit excedido", extra={"client": key})
        raise RateLimitError(retry_after=retry_after_header(retry_after))


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
def login(
    req: LoginRequest,
    request: Request,
    _rate_limit: None = Depends(enforce_login_rate_limit),
    use_case: LoginUseCase = Depends(get_login_use_case),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    """Intercambia email + password por un access token."""
    result = use_case.execute(LoginInput(email=req.email, password=req.password))
    route = f"{request.method} {request.url.path}"

    if result.error:
        emit_audit_event(
            audit_repo,
            action=LOGIN_AUDIT_ACTION,
            decision=AuditDecision.REJECTED,
            route=route,
            reason=result.error.reason or result.error.code.value,
            metadata={"client": get_client_identifier(request)},
        )
        raise_user_error(result.error)

    user = result.user
    emit_audit_event(
        audit_repo,
        action=LOGIN_AUDIT_ACTION,
        decision=AuditDecision.ALLOWED,
        actor=f"user:{user.id}",
        route=route,
        metadata={"role": user.role.value, "real_estate_id": user.real_estate_id},
    )
    logger.info("Login exitoso", extra={"user_id": str(user.id)})

    return LoginResponse(
        token=result.token,
        expires_in=result.expires_in,
        user=to_user_response(user),
    )
