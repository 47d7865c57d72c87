"""
Alembic environment configuration for Clockbook.

The database URL is resolved in this order:
  - ``sqlalchemy.url`` already set on the Config (``Database.migrate`` does this)
  - DATABASE_PATH env var
  - DATA_DIR/app.db (same default as config.Config)
"""

import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

# -- Alembic Config object (provides access to alembic.ini values) -----------
config = context.config

# -- Logging setup from alembic.ini (CLI runs only) ---------------------------
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# -- No declarative MetaData (migrations are written by hand) -----------------
target_metadata = None

# -- Resolve database URL ----------------------------------------------------
if not config.get_main_option("sqlalchemy.url"):
    data_dir = os.environ.get("DATA_DIR", "data")
    sqlite_path = os.environ.get("DATABASE_PATH", os.path.join(data_dir, "app.db"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{sqlite_path}")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode; emits SQL to stdout."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations with a live database connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite doesn't support ALTER for most operations;
            # render_as_batch lets Alembic work around that.
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
