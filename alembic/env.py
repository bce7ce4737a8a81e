"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: alembic/env.py (Alembic Environment)

Responsibilities:
  - Correr las migraciones del CRM (tabla users) online u offline.
  - Resolver la URL: DATABASE_URL (vía Settings) o sqlalchemy.url del ini.

Collaborators:
  - realestate_crm.crosscutting.config.get_settings
  - SQLAlchemy Engine con driver psycopg

Policy:
  - SQL explícito en cada revisión (sin ORM ni autogenerate).
============================================================
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config

if config.config_file_name and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

# R: sin modelos declarativos; las revisiones usan op.* directamente.
target_metadata = None

_PSYCOPG_SCHEMES = ("postgresql://", "postgres://")


def _with_psycopg_driver(url: str) -> str:
    for scheme in _PSYCOPG_SCHEMES:
        if url.startswith(scheme):
            return "postgresql+psycopg://" + url[len(scheme):]
    return url


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        from realestate_crm.crosscutting.config import get_settings

        url = get_settings().database_url or config.get_main_option("sqlalchemy.url")
    return _with_psycopg_driver(url)


def run_migrations_offline() -> None:
    """Emite SQL sin conectarse (alembic upgrade --sql)."""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = dict(config.get_section(config.config_ini_section) or {})
    section["sqlalchemy.url"] = database_url()
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
