"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context)
  - Mount auth, users and health routers
  - Validate security settings and open the DB pool on startup

Collaborators:
  - FastAPI: ASGI web framework
  - CORSMiddleware: Cross-Origin Resource Sharing handler
  - RequestContextMiddleware: Request ID, response time and logging context
  - auth_routes / user_routes / health_routes

Constraints:
  - A missing JWT_SECRET aborts startup (fail-fast, before serving traffic)
  - Test environments run against in-memory adapters (no pool)

Notes:
  - Middleware order matters: RequestContext → CORS → routes
  - /health is public and quiet in request logs
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..application.dev_seed_admin import ensure_dev_admin
from ..container import get_user_repository
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import (
    REQUEST_ID_HEADER,
    RESPONSE_TIME_HEADER,
    RequestContextMiddleware,
)
from ..identity.auth_users import hash_password
from ..infrastructure.db.pool import close_pool, init_pool
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .health_routes import router as health_router
from .user_routes import router as users_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Validates settings and initializes pool."""
    settings = get_settings()
    settings.validate_security_requirements()

    use_pool = not settings.is_test()
    if use_pool:
        # Initialize DB pool (must happen before any repository usage)
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        try:
            ensure_dev_admin(
                settings,
                user_repo=get_user_repository(),
                password_hasher=hash_password,
                env=os.environ,
            )
        except Exception as e:
            logger.error("Startup failed", extra={"error": str(e)})
            raise

        logger.info(
            "RealEstatePro CRM API starting up",
            extra={
                "environment": settings.app_env,
                "version": settings.app_version,
                "login_rate_limit": settings.login_rate_limit,
                "login_rate_limit_window_ms": settings.login_rate_limit_window_ms,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        if use_pool:
            close_pool()
        logger.info("RealEstatePro CRM API shutting down")


def _get_allowed_origins() -> list[str]:
    """CORS origins from settings; wildcard when settings can't load at import time."""
    try:
        return get_settings().get_allowed_origins_list() or ["*"]
    except Exception:
        return ["*"]


# R: Create FastAPI application instance with API metadata
app = FastAPI(
    title="RealEstatePro CRM API",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "User authentication (JWT)"},
        {"name": "users", "description": "User management (requires admin role)"},
        {"name": "health", "description": "Liveness + database check"},
    ],
)

# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. RequestContextMiddleware - sets request_id, response time
app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER, RESPONSE_TIME_HEADER],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(health_router)

# R: Register exception handlers for structured error responses
register_exception_handlers(app)
