"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_users (Alembic Migration)

Responsibilities:
  - Crear la tabla users (Credential Store) desde cero.
  - Garantizar unicidad de email sin distinguir mayúsculas.
  - Indexar los filtros del listado (tenant, rol, orden por created_at).

Collaborators:
  - PostgreSQL 14+
  - infrastructure/repositories/postgres/user.py (usa este esquema como contrato)

Policy:
  - Migración BASELINE. Cambios futuros: migraciones aditivas (002+).
  - Convención de nombres:
      pk_<tabla>, uq_<tabla>_<col>, ix_<tabla>_<col>
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_users"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        # role es string por simplicidad (evita acople a enums DB).
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'tenant'"),
        ),
        sa.Column("real_estate_id", sa.String(64), nullable=True),
        sa.Column("building_id", sa.String(64), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("avatar", sa.Text, nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "modules",
            postgresql.ARRAY(sa.Text),
            nullable=False,
            server_default=sa.text("ARRAY[]::text[]"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.CheckConstraint(
            "role IN ('super_admin','admin','sales','maintenance','receptionist','tenant')",
            name="ck_users_role",
        ),
    )

    # Unicidad case-insensitive (el repo busca por lower(email)).
    op.execute("CREATE UNIQUE INDEX uq_users_email_lower ON users (lower(email))")

    op.create_index("ix_users_real_estate_id", "users", ["real_estate_id"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_created_at", "users", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_users_created_at", table_name="users")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_real_estate_id", table_name="users")
    op.execute("DROP INDEX IF EXISTS uq_users_email_lower")
    op.drop_table("users")
