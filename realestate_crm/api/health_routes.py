"""
===============================================================================
TARJETA CRC — api/health_routes.py (Health Check)
===============================================================================

Responsabilidades:
  - GET /health: estado del proceso + latencia de un ping a la base.
  - 500 HEALTH_CHECK_FAILED con el detalle del error si la base no responde.

Colaboradores:
  - container.get_user_repository (ping)
  - crosscutting.config.get_settings (version / environment)
===============================================================================
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from .. import __version__
from ..container import get_user_repository
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import AppHTTPException, ErrorCode
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from .schemas import CamelModel

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


class DatabaseHealth(CamelModel):
    status: str
    response_time: str


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    uptime: float
    database: DatabaseHealth
    version: str
    environment: str


def uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 3)


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
def health(user_repo: UserRepository = Depends(get_user_repository)):
    settings = get_settings()
    start = time.perf_counter()
    try:
        ok = user_repo.ping()
    except Exception as exc:
        logger.warning("Health check: DB unavailable", extra={"error": str(exc)})
        raise AppHTTPException(
            status_code=500,
            code=ErrorCode.HEALTH_CHECK_FAILED,
            detail="Health check failed",
            errors=[{"database": str(exc)}],
        ) from exc

    if not ok:
        raise AppHTTPException(
            status_code=500,
            code=ErrorCode.HEALTH_CHECK_FAILED,
            detail="Health check failed",
            errors=[{"database": "ping returned false"}],
        )

    elapsed_ms = round((time.perf_counter() - start) * 1000)
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        uptime=uptime_seconds(),
        database=DatabaseHealth(status="connected", response_time=f"{elapsed_ms}ms"),
        version=settings.app_version or __version__,
        environment=settings.app_env,
    )
