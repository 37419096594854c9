from __future__ import annotations

import pytest
from sqlalchemy import create_engine, inspect, text

from backend.app.migrations import MigrationLock, build_alembic_config, run_database_migrations
from alembic.script import ScriptDirectory


def _head_revision() -> str:
    return ScriptDirectory.from_config(build_alembic_config()).get_current_head()


def _stored_version(url: str) -> str:
    engine = create_engine(url, connect_args={"check_same_thread": False})
    try:
        with engine.connect() as connection:
            return connection.scalar(text("SELECT version_num FROM alembic_version"))
    finally:
        engine.dispose()


def test_run_database_migrations_creates_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'fresh.db'}"

    head = run_database_migrations(url)

    engine = create_engine(url, connect_args={"check_same_thread": False})
    inspector = inspect(engine)
    for table in ("properties", "rooms", "meter_readings", "bills", "bill_charges", "payments"):
        assert inspector.has_table(table)
    engine.dispose()

    assert head == _head_revision()
    assert _stored_version(url) == head


def test_run_database_migrations_leaves_foreign_tables_alone(tmp_path):
    url = f"sqlite:///{tmp_path / 'legacy.db'}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE legacy_table (id INTEGER PRIMARY KEY)"))
    engine.dispose()

    run_database_migrations(url)

    engine = create_engine(url, connect_args={"check_same_thread": False})
    tables = inspect(engine).get_table_names()
    engine.dispose()
    assert "legacy_table" in tables
    assert "bills" in tables
    assert _stored_version(url) == _head_revision()



def test_run_database_migrations_twice_is_a_no_op(tmp_path):
    url = f"sqlite:///{tmp_path / 'twice.db'}"

    first = run_database_migrations(url)
    second = run_database_migrations(url)

    assert first == second == _stored_version(url)


def test_migration_lock_times_out_while_held(tmp_path):
    lock_path = tmp_path / "migrate.lock"

    with MigrationLock(lock_path, timeout=1):
        with pytest.raises(TimeoutError):
            with MigrationLock(lock_path, timeout=0.3):
                pass

    with MigrationLock(lock_path, timeout=0.3):
        pass
