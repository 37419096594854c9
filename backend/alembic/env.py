"""Alembic runtime for the KostMan schema.

The database URL comes from ``sqlalchemy.url`` (set by ``build_alembic_config``)
and falls back to the application's own ``DATABASE_URL`` resolution.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

# ``backend`` is imported as a namespace package from the repository root.
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from backend.app import models  # noqa: E402,F401  (registers every table)
from backend.app.database import Base, SQLALCHEMY_DATABASE_URL  # noqa: E402

config = context.config
if config.config_file_name and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

url = config.get_main_option("sqlalchemy.url") or SQLALCHEMY_DATABASE_URL
# SQLite cannot ALTER most constraints in place; batch mode recreates the table.
batch = url.startswith("sqlite")


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, render_as_batch=batch, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    engine = create_engine(
        url,
        poolclass=pool.NullPool,
        connect_args={"check_same_thread": False} if batch else {},
    )
    try:
        with engine.connect() as connection:
            _configure(connection=connection)
    finally:
        engine.dispose()
