"""
===============================================================================
TARJETA CRC — api/user_routes.py (Administración de Usuarios)
===============================================================================

Responsabilidades:
  - GET /users: listado paginado con filtros, acotado al tenant del actor.
  - POST /users: alta de usuario con reglas de rol y tenant.
  - Emitir auditoría (best-effort) para altas.

Seguridad:
  - Ambas rutas requieren rol >= admin (Request Gate).
  - GET valida ?realEstateId contra el scope del actor antes de consultar.
  - POST re-valida al actor contra el store (baja/desactivación/cambio de rol).

Colaboradores:
  - identity.gate.require_role
  - application.usecases.ListUsersUseCase / CreateUserUseCase
  - api.error_mapping.raise_user_error
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import Field

from ..application.usecases import (
    CreateUserInput,
    CreateUserUseCase,
    ListUsersInput,
    ListUsersUseCase,
)
from ..audit import emit_audit_event
from ..container import (
    get_audit_repository,
    get_create_user_use_case,
    get_list_users_use_case,
)
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.pagination import PaginationMeta
from ..domain.audit import AuditDecision
from ..domain.repositories import AuditEventRepository
from ..identity.gate import require_role
from ..identity.tokens import UserContext
from ..identity.users import UserRole
from .error_mapping import raise_user_error
from .schemas import CamelModel, UserResponse, to_user_response

router = APIRouter(prefix="/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES)

CREATE_USER_AUDIT_ACTION = "users.create"


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class UserListResponse(CamelModel):
    users: list[UserResponse]
    pagination: PaginationMeta


class CreateUserRequest(CamelModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=512)
    full_name: str = Field(..., max_length=512)
    role: UserRole = UserRole.TENANT
    real_estate_id: str | None = None
    building_id: str | None = None
    phone: str | None = Field(default=None, max_length=50)
    avatar: str | None = None
    modules: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("", response_model=UserListResponse, response_model_by_alias=True)
def list_users(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    role: UserRole | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None, max_length=200),
    real_estate_id: str | None = Query(None, alias="realEstateId"),
    actor: UserContext = Depends(
        require_role(UserRole.ADMIN, tenant_param="realEstateId")
    ),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    """Lista usuarios visibles para el actor (created_at DESC)."""
    result = use_case.execute(
        ListUsersInput(
            actor=actor,
            page=page,
            limit=limit or get_settings().users_page_default_limit,
            role=role,
            is_active=is_active,
            search=search,
            real_estate_id=real_estate_id,
        )
    )
    if result.error:
        raise_user_error(result.error)

    return UserListResponse(
        users=[to_user_response(u) for u in result.users],
        pagination=result.pagination,
    )


@router.post(
    "",
    response_model=UserResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    req: CreateUserRequest,
    request: Request,
    actor: UserContext = Depends(require_role(UserRole.ADMIN, revalidate=True)),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    """Crea un usuario dentro del scope del actor."""
    result = use_case.execute(
        CreateUserInput(
            actor=actor,
            email=req.email,
            password=req.password,
            full_name=req.full_name,
            role=req.role,
            real_estate_id=req.real_estate_id,
            building_id=req.building_id,
            phone=req.phone,
            avatar=req.avatar,
            modules=tuple(req.modules),
        )
    )
    route = f"{request.method} {request.url.path}"

    if result.error:
        emit_audit_event(
            audit_repo,
            action=CREATE_USER_AUDIT_ACTION,
            decision=AuditDecision.REJECTED,
            context=actor,
            route=route,
            reason=result.error.reason or result.error.code.value,
            metadata={"target_role": req.role.value},
        )
        raise_user_error(result.error)

    user = result.user
    emit_audit_event(
        audit_repo,
        action=CREATE_USER_AUDIT_ACTION,
        decision=AuditDecision.ALLOWED,
        context=actor,
        route=route,
        metadata={
            "target_user_id": str(user.id),
            "target_role": user.role.value,
            "target_real_estate_id": user.real_estate_id,
        },
    )
    return to_user_response(user)
