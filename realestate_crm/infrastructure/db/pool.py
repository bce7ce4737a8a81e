"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL del CRM (uno por proceso)

Responsabilidades:
  - Abrirlo en el lifespan de la API y cerrarlo al apagar.
  - Preparar cada conexión: zona horaria UTC y statement_timeout.
  - Fallar explícitamente ante doble init o uso sin init.

Colaboradores:
  - psycopg_pool.ConnectionPool
  - crosscutting.config (db_statement_timeout_ms)
  - repositories.postgres.user (consumidor)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError

APPLICATION_NAME = "realestate-crm-api"

_pool: Optional[ConnectionPool] = None
_lock = threading.Lock()


def _prepare_connection(conn) -> None:
    # R: created_at/updated_at son timestamptz; el CRM siempre habla UTC.
    conn.execute("SET TIME ZONE 'UTC'")
    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms > 0:
        conn.execute(f"SET statement_timeout = {timeout_ms}")
    conn.commit()


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    """Abre el pool del proceso. Llamarlo dos veces es un error."""
    global _pool

    with _lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("El pool DB ya está abierto")

        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            kwargs={"application_name": APPLICATION_NAME},
            configure=_prepare_connection,
            open=True,
        )
        logger.info(
            "Pool DB abierto",
            extra={"min_size": min_size, "max_size": max_size},
        )
        return _pool


def get_pool() -> ConnectionPool:
    if _pool is None:
        raise PoolNotInitializedError("Pool no inicializado: falta init_pool()")
    return _pool


def close_pool() -> None:
    """Idempotente: sin pool abierto no hace nada."""
    global _pool

    with _lock:
        if _pool is None:
            return
        try:
            _pool.close()
        finally:
            _pool = None
        logger.info("Pool DB cerrado")
