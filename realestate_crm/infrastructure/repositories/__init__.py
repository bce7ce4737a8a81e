"""
============================================================
TARJETA CRC
============================================================
Class: realestate_crm.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (Postgres, InMemory,
  Logging) en un único punto de importación.

Collaborators:
- Repositorios Postgres (SQL crudo)
- Repositorios InMemory (testing / local)
============================================================
"""

from .in_memory import InMemoryAuditEventRepository, InMemoryUserRepository
from .logging_audit import LoggingAuditEventRepository
from .postgres import PostgresUserRepository

__all__ = [
    # Postgres
    "PostgresUserRepository",
    # Logging
    "LoggingAuditEventRepository",
    # In-memory
    "InMemoryUserRepository",
    "InMemoryAuditEventRepository",
]
