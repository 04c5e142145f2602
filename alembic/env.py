"""Alembic environment configuration for quotation-vault.

Migrations run synchronously through psycopg2. The URL comes from the same
resolution order the service uses (`quotation_vault.db.DatabaseConfig`),
rewritten to the postgresql+psycopg2:// scheme.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from quotation_vault.db import DatabaseConfig

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _get_url() -> str:
    url = DatabaseConfig.get_connection_string()
    for scheme in ("postgresql://", "postgres://"):
        if url.startswith(scheme):
            return "postgresql+psycopg2://" + url[len(scheme):]
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_get_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _get_url()
    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
