"""
Errores del pool de conexiones.

Heredan de DatabaseError: la API los responde como 500 DATABASE_ERROR y el
detalle queda sólo en los logs.
"""

from ...crosscutting.exceptions import DatabaseError


class DatabasePoolError(DatabaseError):
    """Fallo de ciclo de vida del pool."""


class PoolAlreadyInitializedError(DatabasePoolError):
    pass


class PoolNotInitializedError(DatabasePoolError):
    pass
