"""Alembic environment for the `ringcentral_token` store.

Revisions are hand-written with `op` calls and the runtime reads the table
through raw SQL, so there is no ORM metadata and autogenerate is not used.
The target URL comes from `sqlalchemy.url` when a caller sets it, otherwise
from `DATABASE_URL`. SQLite targets run in batch mode so later column
changes can be applied with table rebuilds.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

from ringcentral_fax.config import config_load_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", config_load_database_url())

target_metadata = None


def _env_uses_batch_mode(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def run_token_store_migrations_offline() -> None:
    """Emit token store migration SQL without a live connection."""

    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_env_uses_batch_mode(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_token_store_migrations_online() -> None:
    """Apply token store migrations over a short-lived connection."""

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_token_store_migrations_offline()
else:
    run_token_store_migrations_online()
