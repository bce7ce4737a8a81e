"""
===============================================================================
TARJETA CRC — realestate_crm/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, rate limiter, casos de uso).
  - Exponer factories para FastAPI (Depends).
  - Mantener singletons con caching (lru_cache).
  - Elegir adapters según Settings: in-memory en test/ci, Postgres en el resto.

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.* (puertos)
  - infrastructure.repositories.* (implementaciones)
  - application.usecases.* (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Tests pueden resetear todo con reset_container().
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.usecases import (
    CreateUserUseCase,
    ListUsersUseCase,
    LoginUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.rate_limit import FixedWindowRateLimiter
from .domain.repositories import AuditEventRepository, UserRepository
from .identity.auth_users import hash_password
from .infrastructure.repositories import (
    InMemoryAuditEventRepository,
    InMemoryUserRepository,
    LoggingAuditEventRepository,
    PostgresUserRepository,
)


def _is_test_env() -> bool:
    return get_settings().is_test()


# =============================================================================
# Repositorios
# =============================================================================


@lru_cache
def get_user_repository() -> UserRepository:
    if _is_test_env():
        return InMemoryUserRepository()
    return PostgresUserRepository()


@lru_cache
def get_audit_repository() -> AuditEventRepository:
    if _is_test_env():
        return InMemoryAuditEventRepository()
    return LoggingAuditEventRepository()


# =============================================================================
# Infra de request
# =============================================================================


@lru_cache
def get_login_rate_limiter() -> FixedWindowRateLimiter:
    s = get_settings()
    return FixedWindowRateLimiter(
        limit=s.login_rate_limit,
        window_ms=s.login_rate_limit_window_ms,
        max_keys=s.rate_limit_max_keys,
    )


# =============================================================================
# Casos de uso
# =============================================================================


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase(user_repository=get_user_repository())


def get_list_users_use_case() -> ListUsersUseCase:
    s = get_settings()
    return ListUsersUseCase(
        user_repository=get_user_repository(),
        max_limit=s.users_page_max_limit,
    )


def get_create_user_use_case() -> CreateUserUseCase:
    return CreateUserUseCase(
        user_repository=get_user_repository(),
        password_hasher=hash_password,
    )


def reset_container() -> None:
    """Limpia singletons (tests / cambio de settings)."""
    get_user_repository.cache_clear()
    get_audit_repository.cache_clear()
    get_login_rate_limiter.cache_clear()
