"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Cargar usuarios para autenticación (por email / por id).
  - Listar y contar usuarios con filtros (tenant, rol, activo, búsqueda).
  - Crear usuarios y actualizar campos administrables (password, role, is_active).
  - Mapear filas crudas -> entidad `User` y validar `UserRole`.
  - Exponer fallos consistentes vía `DatabaseError` / `ConflictError`.

Collaborators:
  - psycopg_pool.ConnectionPool (pool de conexiones)
  - infrastructure.db.pool.get_pool (pool global si no se inyecta)
  - identity.users.User / UserRole
  - crosscutting.logger.logger
  - crosscutting.exceptions.DatabaseError / ConflictError

Constraints / Notes:
  - Repositorio puro: NO define reglas de negocio (scoping, permisos).
  - Email se persiste normalizado; índice único sobre lower(email).
  - SQL parametrizado siempre (nunca interpolar input de usuario).
  - Orden estable en listados: created_at DESC, id DESC.
============================================================
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID, uuid4

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import ConflictError, DatabaseError
from ....crosscutting.logger import logger
from ....domain.repositories import NewUser, UserFilters
from ....identity.users import User, UserRole

# R: Lista explícita de columnas para mantener el contrato estable con migraciones.
_USER_COLUMNS = (
    "id, email, password_hash, full_name, role, real_estate_id, building_id, "
    "phone, avatar, is_active, modules, created_at, updated_at"
)

# R: Ordering determinístico. Si created_at empata, id ordena estable.
_USER_ORDER_BY = "created_at DESC, id DESC"


def _row_to_user(row: tuple) -> User:
    """
    Convierte una fila de `users` a entidad `User`.

    Role casting estricto: si el valor no matchea el enum -> DatabaseError.
    """
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(reason=f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=row[0],
        email=row[1],
        password_hash=row[2],
        full_name=row[3],
        role=role,
        real_estate_id=row[5],
        building_id=row[6],
        phone=row[7],
        avatar=row[8],
        is_active=row[9],
        modules=tuple(row[10] or ()),
        created_at=row[11],
        updated_at=row[12],
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where_clause(filters: UserFilters) -> tuple[str, list[object]]:
    """Construye WHERE a partir de filtros (fragmentos controlados por código)."""
    conditions: list[str] = []
    params: list[object] = []

    if filters.scope_to_real_estate:
        conditions.append("real_estate_id IS NOT DISTINCT FROM %s")
        params.append(filters.real_estate_id)
    elif filters.real_estate_id:
        conditions.append("real_estate_id = %s")
        params.append(filters.real_estate_id)

    if filters.role is not None:
        conditions.append("role = %s")
        params.append(filters.role.value)

    if filters.is_active is not None:
        conditions.append("is_active = %s")
        params.append(filters.is_active)

    if filters.search:
        pattern = f"%{_escape_like(filters.search.strip())}%"
        conditions.append("(email ILIKE %s OR full_name ILIKE %s)")
        params.extend([pattern, pattern])

    if not conditions:
        return "", params
    return "WHERE " + " AND ".join(conditions), params


class PostgresUserRepository:
    """Repositorio PostgreSQL para usuarios (tabla users)."""

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        # Pool inyectable (para tests); si es None se usa el global.
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    # ------------------------------------------------------------
    # Helpers internos (DRY: errores/logging consistentes)
    # ------------------------------------------------------------
    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
    ) -> tuple | None:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except pg_errors.UniqueViolation as exc:
            logger.warning(log_msg, extra={**log_extra, "error": "unique_violation"})
            raise ConflictError(
                "El email ya existe", error_code="DUPLICATE_EMAIL", reason=str(exc)
            ) from exc
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(reason=f"{log_msg}: {exc}", original_error=exc) from exc

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
    ) -> list[tuple]:
        try:
            pool = self._get_pool()
            with pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except DatabaseError:
            raise
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(reason=f"{log_msg}: {exc}", original_error=exc) from exc

    # --- Lectura ---
    def get_user_by_email(self, email: str) -> User | None:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE lower(email) = lower(%s)",
            params=(email,),
            log_msg="PostgresUserRepository: get_user_by_email failed",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserRepository: get_user_by_id failed",
            log_extra={"user_id": str(user_id)},
        )
        return _row_to_user(row) if row else None

    def list_users(
        self, *, filters: UserFilters, limit: int, offset: int
    ) -> list[User]:
        if limit <= 0:
            return []
        where, params = _where_clause(filters)
        rows = self._fetchall(
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                {where}
                ORDER BY {_USER_ORDER_BY}
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, max(0, offset)],
            log_msg="PostgresUserRepository: list_users failed",
            log_extra={"limit": limit, "offset": offset},
        )
        return [_row_to_user(r) for r in rows]

    def count_users(self, *, filters: UserFilters) -> int:
        where, params = _where_clause(filters)
        row = self._fetchone(
            query=f"SELECT count(*) FROM users {where}",
            params=params,
            log_msg="PostgresUserRepository: count_users failed",
            log_extra={},
        )
        return int(row[0]) if row else 0

    # --- Escritura ---
    def create_user(self, new_user: NewUser) -> User:
        """
        Crea un usuario y devuelve el registro.

        Email duplicado (uq_users_email_lower) -> ConflictError(DUPLICATE_EMAIL).
        """
        user_id = uuid4()
        row = self._fetchone(
            query=f"""
                INSERT INTO users (
                    id, email, password_hash, full_name, role, real_estate_id,
                    building_id, phone, avatar, is_active, modules
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(
                user_id,
                new_user.email,
                new_user.password_hash,
                new_user.full_name,
                new_user.role.value,
                new_user.real_estate_id,
                new_user.building_id,
                new_user.phone,
                new_user.avatar,
                new_user.is_active,
                list(new_user.modules),
            ),
            log_msg="PostgresUserRepository: create_user failed",
            log_extra={"user_id": str(user_id), "role": new_user.role.value},
        )
        if not row:
            raise DatabaseError(
                reason="PostgresUserRepository: create_user failed (no row returned)"
            )
        return _row_to_user(row)

    def update_user(
        self,
        user_id: UUID,
        *,
        password_hash: str | None = None,
        role: UserRole | None = None,
        is_active: bool | None = None,
    ) -> User | None:
        """
        Update dinámico (admin/dev tools).

        Sin cambios => retorna el usuario actual (si existe).
        """
        updates: list[str] = []
        params: list[object] = []

        if password_hash is not None:
            updates.append("password_hash = %s")
            params.append(password_hash)
        if role is not None:
            updates.append("role = %s")
            params.append(role.value)
        if is_active is not None:
            updates.append("is_active = %s")
            params.append(is_active)

        if not updates:
            return self.get_user_by_id(user_id)

        updates.append("updated_at = now()")
        params.append(user_id)

        # updates es controlado por código (no input usuario).
        row = self._fetchone(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            log_msg="PostgresUserRepository: update_user failed",
            log_extra={"user_id": str(user_id), "updates": updates},
        )
        return _row_to_user(row) if row else None

    def ping(self) -> bool:
        row = self._fetchone(
            query="SELECT 1",
            params=(),
            log_msg="PostgresUserRepository: ping failed",
            log_extra={},
        )
        return bool(row and row[0] == 1)
