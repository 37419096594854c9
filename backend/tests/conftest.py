from __future__ import annotations

from datetime import date
from decimal import Decimal
import os
import sys
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The in-memory test database is created from the models, not from Alembic.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "0")

from backend.app.database import Base, get_db
from backend.app.main import app
from backend.app import models

# One shared in-memory database; every test runs inside a rolled back transaction.
engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)


# pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, _record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(connection):
    connection.exec_driver_sql("BEGIN")


# Service commits and rollbacks stay inside a SAVEPOINT of the test transaction.
TestingSessionLocal = sessionmaker(autoflush=False, join_transaction_mode="create_savepoint")


@pytest.fixture(scope="session", autouse=True)
def schema() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    with engine.connect() as connection:
        outer = connection.begin()
        session = TestingSessionLocal(bind=connection)
        yield session
        session.close()
        outer.rollback()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def request_session() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            # Tests read through the same session after each request.
            db_session.expire_all()

    app.dependency_overrides[get_db] = request_session
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seed_basic_data(db_session: Session) -> dict:
    kost = models.Property(name="Kost Melati", address="Jl. Melati No. 7, Yogyakarta")
    kost.settings = models.PropertySettings(
        cost_per_kwh=Decimal("1500"),
        water_fee=Decimal("50000"),
        trash_fee=Decimal("25000"),
    )
    db_session.add(kost)

    tenant = models.Tenant(
        name="Budi Santoso",
        contact="081234567890",
        id_card_number="3404010101900001",
    )
    db_session.add(tenant)
    db_session.flush()

    room = models.Room(
        property_id=kost.id,
        tenant_id=tenant.id,
        name="A1",
        price=Decimal("3000000"),
        status=models.RoomStatus.OCCUPIED,
        use_trash_service=True,
        occupant_count=1,
        move_in_date=date(2025, 6, 10),
    )
    vacant = models.Room(
        property_id=kost.id,
        name="A2",
        price=Decimal("2500000"),
        status=models.RoomStatus.AVAILABLE,
    )
    db_session.add_all([room, vacant])
    db_session.commit()

    return {"property": kost, "tenant": tenant, "room": room, "vacant_room": vacant}
