# =============================================================================
# FILE: application/dev_seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Super Admin (Local-only + E2E override)
===============================================================================

Qué es:
    Asegura que exista un super admin para desarrollo cuando está configurado.
    Soporta override en E2E para CI (sin depender de app_env == "local").

Seguridad:
    - Guard estricto: si NO es E2E => solo corre en app_env == "local".
    - Si es E2E => permite otros envs porque CI puede setear app_env distinto.

Patrones:
    - Dependency Injection (repo + hasher + env mapping)
    - Fail-fast guard (safety boundary)
    - Idempotencia (ensure-create / optional reset)

CRC:
    Component: ensure_dev_admin
    Responsibilities:
      - Validar guard de ambiente
      - Resolver configuración (settings vs E2E env)
      - Asegurar usuario (create o update si force_reset)
    Collaborators:
      - user_repo (UserRepository)
      - password_hasher
      - Settings + env mapping
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final, Mapping

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import NewUser, UserRepository
from ..identity.users import UserRole

_ENV_FLAG_E2E_SEED_ADMIN: Final[str] = "E2E_SEED_ADMIN"
_ENV_E2E_ADMIN_EMAIL: Final[str] = "E2E_ADMIN_EMAIL"
_ENV_E2E_ADMIN_PASSWORD: Final[str] = "E2E_ADMIN_PASSWORD"

_DEFAULT_E2E_EMAIL: Final[str] = "superadmin@realestatepro.com"
_DEFAULT_E2E_PASSWORD: Final[str] = "SuperAdmin123!"

# R: el super admin sembrado tiene acceso a todos los módulos.
SEED_MODULES: Final[tuple[str, ...]] = ("all",)


@dataclass(frozen=True, slots=True)
class _AdminSeedPlan:
    """Resolved seed configuration (no I/O)."""

    enabled: bool
    is_e2e: bool
    email: str
    password: str
    full_name: str
    force_reset: bool


def _parse_bool(value: str | None) -> bool:
    v = (value or "").strip().lower()
    return v in {"1", "true", "yes", "on"}


def _resolve_seed_plan(settings: Settings, env: Mapping[str, str]) -> _AdminSeedPlan:
    """
    Resolve seed inputs from:
      - settings (dev_seed_admin*)
      - OR E2E env override (E2E_SEED_ADMIN=true)
    """
    is_e2e = _parse_bool(env.get(_ENV_FLAG_E2E_SEED_ADMIN))

    if not (settings.dev_seed_admin or is_e2e):
        return _AdminSeedPlan(False, is_e2e, "", "", "", False)

    if is_e2e:
        return _AdminSeedPlan(
            enabled=True,
            is_e2e=True,
            email=env.get(_ENV_E2E_ADMIN_EMAIL, _DEFAULT_E2E_EMAIL),
            password=env.get(_ENV_E2E_ADMIN_PASSWORD, _DEFAULT_E2E_PASSWORD),
            full_name=settings.dev_seed_admin_full_name,
            force_reset=False,
        )

    return _AdminSeedPlan(
        enabled=True,
        is_e2e=False,
        email=settings.dev_seed_admin_email,
        password=settings.dev_seed_admin_password or "",
        full_name=settings.dev_seed_admin_full_name,
        force_reset=bool(settings.dev_seed_admin_force_reset),
    )


def _assert_allowed_environment(settings: Settings, *, is_e2e: bool) -> None:
    if is_e2e:
        return

    env = (settings.app_env or "").strip().lower()
    if env != "local":
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but ENV is '{env}' (must be 'local'). "
            "Safety guard prevents accidental overrides."
        )


def ensure_dev_admin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str],
    env: Mapping[str, str],
) -> None:
    """
    Ensure a development super admin exists if configured.

    Behavior:
      - If disabled: no-op
      - If enabled:
          - Create user if missing
          - If force_reset: update password/role/is_active
          - Otherwise: skip if exists
    """
    plan = _resolve_seed_plan(settings, env)
    if not plan.enabled:
        return

    _assert_allowed_environment(settings, is_e2e=plan.is_e2e)

    email = (plan.email or "").strip().lower()
    if not email or not plan.password:
        raise ValueError("Dev seed admin is enabled but email/password are empty")

    logger.info(
        "Dev seed admin: ensuring super admin",
        extra={"email": email, "force_reset": plan.force_reset, "is_e2e": plan.is_e2e},
    )

    existing = user_repo.get_user_by_email(email)

    if existing is None:
        user_repo.create_user(
            NewUser(
                email=email,
                password_hash=password_hasher(plan.password),
                full_name=plan.full_name,
                role=UserRole.SUPER_ADMIN,
                is_active=True,
                modules=SEED_MODULES,
            )
        )
        logger.info("Dev seed admin: user created", extra={"email": email})
        return

    if plan.force_reset:
        user_repo.update_user(
            existing.id,
            password_hash=password_hasher(plan.password),
            role=UserRole.SUPER_ADMIN,
            is_active=True,
        )
        logger.info("Dev seed admin: user reset applied", extra={"email": email})
        return

    logger.info("Dev seed admin: user exists; skipping", extra={"email": email})
