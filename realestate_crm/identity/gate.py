"""
===============================================================================
TARJETA CRC — identity/gate.py (Request Gate)
===============================================================================

Responsabilidades:
  - Componer verificación de token + jerarquía de roles + scoping.
  - Evaluar cada request como una máquina de estados pura (evaluate_access).
  - Exponer dependencias FastAPI: require_authenticated, require_role,
    require_any_role.
  - Registrar un evento de auditoría por cada decisión (best-effort).
  - Re-validar contra el Credential Store en rutas de alto privilegio (opcional).

Estados:
  NO_TOKEN -> VERIFYING -> ROLE_CHECKING -> SCOPE_CHECKING -> AUTHORIZED
  Rechazos: REJECTED_401 (falta/inválido), REJECTED_403 (rol/scope).

Colaboradores:
  - identity.tokens.verify_access_token (único constructor de UserContext)
  - identity.roles / identity.scoping (políticas puras)
  - audit.emit_audit_event
  - container.get_audit_repository / get_user_repository

Reglas de seguridad:
  - La identidad sale solo del token verificado; nunca de headers x-user-*.
  - Rechazo por defecto ante cualquier error de verificación.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from fastapi import Depends, Header, Request
from starlette.concurrency import run_in_threadpool

from ..audit import emit_audit_event
from ..container import get_audit_repository, get_user_repository
from ..context import set_actor_context
from ..crosscutting.exceptions import (
    AuthorizationError,
    CRMError,
    InvalidTokenError,
    MissingTokenError,
)
from ..crosscutting.logger import logger
from ..domain.audit import AuditDecision
from ..domain.repositories import AuditEventRepository, UserRepository
from .auth_users import extract_bearer_token
from .roles import has_any_role
from .scoping import can_access_building, can_access_tenant
from .tokens import TokenSettings, UserContext, verify_access_token
from .users import UserRole

GATE_AUDIT_ACTION = "gate.decision"


class GateState(str, Enum):
    NO_TOKEN = "no_token"
    VERIFYING = "verifying"
    ROLE_CHECKING = "role_checking"
    SCOPE_CHECKING = "scope_checking"
    AUTHORIZED = "authorized"
    REJECTED_401 = "rejected_401"
    REJECTED_403 = "rejected_403"


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Resultado de evaluar un request contra una política."""

    state: GateState
    context: UserContext | None = None
    error_code: str | None = None
    reason: str | None = None

    @property
    def allowed(self) -> bool:
        return self.state == GateState.AUTHORIZED

    @property
    def status_code(self) -> int:
        if self.state == GateState.REJECTED_401:
            return 401
        if self.state == GateState.REJECTED_403:
            return 403
        return 200


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """Requisitos de una ruta. roles vacío = solo autenticación."""

    roles: tuple[UserRole, ...] = ()
    real_estate_id: str | None = None
    building_id: str | None = None


def evaluate_access(
    token: str | None,
    policy: AccessPolicy,
    *,
    token_settings: TokenSettings | None = None,
) -> GateDecision:
    """Evalúa token + política sin efectos (salvo logs del verificador)."""
    # NO_TOKEN
    if not token:
        return GateDecision(
            GateState.REJECTED_401, error_code=MissingTokenError.error_code, reason="missing_token"
        )

    # VERIFYING
    try:
        context = verify_access_token(token, token_settings)
    except InvalidTokenError as exc:
        return GateDecision(
            GateState.REJECTED_401, error_code=exc.error_code, reason=exc.reason
        )

    # ROLE_CHECKING
    if policy.roles and not has_any_role(context.role, policy.roles):
        return GateDecision(
            GateState.REJECTED_403,
            context=context,
            error_code="INSUFFICIENT_PERMISSIONS",
            reason=f"role {context.role.value} below {[r.value for r in policy.roles]}",
        )

    # SCOPE_CHECKING
    if not can_access_tenant(context, policy.real_estate_id):
        return GateDecision(
            GateState.REJECTED_403,
            context=context,
            error_code="REAL_ESTATE_ACCESS_DENIED",
            reason=f"real_estate {policy.real_estate_id} outside scope",
        )
    if not can_access_building(context, policy.building_id):
        return GateDecision(
            GateState.REJECTED_403,
            context=context,
            error_code="BUILDING_ACCESS_DENIED",
            reason=f"building {policy.building_id} outside scope",
        )

    return GateDecision(GateState.AUTHORIZED, context=context)


def _revalidate(
    decision: GateDecision, policy: AccessPolicy, user_repo: UserRepository
) -> GateDecision:
    """Relee el usuario del store: detecta bajas, desactivaciones y cambios de rol."""
    context = decision.context
    user = user_repo.get_user_by_id(context.user_id)
    if user is None or not user.is_active:
        return GateDecision(
            GateState.REJECTED_401,
            context=context,
            error_code=InvalidTokenError.error_code,
            reason="user_missing_or_inactive",
        )
    if policy.roles and not has_any_role(user.role, policy.roles):
        return GateDecision(
            GateState.REJECTED_403,
            context=context,
            error_code="INSUFFICIENT_PERMISSIONS",
            reason=f"stored role {user.role.value} no longer sufficient",
        )
    return decision


def _to_exception(decision: GateDecision) -> CRMError:
    if decision.state == GateState.REJECTED_401:
        if decision.error_code == MissingTokenError.error_code:
            return MissingTokenError(reason=decision.reason)
        return InvalidTokenError(reason=decision.reason)
    messages = {
        "REAL_ESTATE_ACCESS_DENIED": "Acceso denegado a la inmobiliaria",
        "BUILDING_ACCESS_DENIED": "Acceso denegado al edificio",
    }
    return AuthorizationError(
        messages.get(decision.error_code or ""),
        error_code=decision.error_code,
        reason=decision.reason,
    )


def _param(request: Request, name: str | None) -> str | None:
    if not name:
        return None
    value = request.path_params.get(name) or request.query_params.get(name)
    return value or None


def _authorize(
    request: Request,
    authorization: str | None,
    *,
    roles: Sequence[UserRole],
    tenant_param: str | None,
    building_param: str | None,
    revalidate: bool,
    audit_repo: AuditEventRepository | None,
    user_repo: UserRepository | None,
) -> UserContext:
    policy = AccessPolicy(
        roles=tuple(roles),
        real_estate_id=_param(request, tenant_param),
        building_id=_param(request, building_param),
    )
    decision = evaluate_access(extract_bearer_token(authorization), policy)
    if decision.allowed and revalidate and user_repo is not None:
        decision = _revalidate(decision, policy, user_repo)

    route = f"{request.method} {request.url.path}"
    emit_audit_event(
        audit_repo,
        action=GATE_AUDIT_ACTION,
        decision=AuditDecision.ALLOWED if decision.allowed else AuditDecision.REJECTED,
        context=decision.context,
        route=route,
        reason=decision.reason,
        metadata={"state": decision.state.value, "code": decision.error_code},
    )

    if not decision.allowed:
        logger.warning(
            "Gate rechazó el request",
            extra={
                "route": route,
                "state": decision.state.value,
                "code": decision.error_code,
                "reason": decision.reason,
            },
        )
        raise _to_exception(decision)

    request.state.user_context = decision.context
    return decision.context


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def _gate_dependency(
    roles: Sequence[UserRole],
    *,
    tenant_param: str | None = None,
    building_param: str | None = None,
    revalidate: bool = False,
) -> Callable:
    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
        audit_repo: AuditEventRepository = Depends(get_audit_repository),
        user_repo: UserRepository = Depends(get_user_repository),
    ) -> UserContext:
        # R: store y auditoría son bloqueantes; el actor se fija en la tarea del request
        # para que handler y casos de uso lo vean en sus logs.
        context = await run_in_threadpool(
            _authorize,
            request,
            authorization,
            roles=roles,
            tenant_param=tenant_param,
            building_param=building_param,
            revalidate=revalidate,
            audit_repo=audit_repo,
            user_repo=user_repo,
        )
        set_actor_context(
            user_id=str(context.user_id), real_estate_id=context.real_estate_id or ""
        )
        return context

    return dependency


def require_authenticated() -> Callable:
    """Dependency FastAPI: requiere token válido (cualquier rol)."""
    return _gate_dependency(())


def require_role(
    role: UserRole | str,
    *,
    tenant_param: str | None = None,
    building_param: str | None = None,
    revalidate: bool = False,
) -> Callable:
    """Dependency FastAPI: requiere rank(rol) >= rank(role) y scope opcional."""
    return _gate_dependency(
        (UserRole(role),),
        tenant_param=tenant_param,
        building_param=building_param,
        revalidate=revalidate,
    )


def require_any_role(
    *roles: UserRole | str,
    tenant_param: str | None = None,
    building_param: str | None = None,
    revalidate: bool = False,
) -> Callable:
    """Dependency FastAPI: requiere satisfacer al menos uno de los roles."""
    if not roles:
        raise ValueError("require_any_role necesita al menos un rol")
    return _gate_dependency(
        tuple(UserRole(r) for r in roles),
        tenant_param=tenant_param,
        building_param=building_param,
        revalidate=revalidate,
    )
