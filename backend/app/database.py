"""Engine, session factory and declarative base for the KostMan backend.

``DATABASE_URL`` selects the database. Without it a SQLite file next to the
``backend`` package is used, unless ``REQUIRE_POSTGRES=1`` forbids SQLite.
Pool settings only apply to server databases.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DEFAULT_SQLITE_PATH = Path(__file__).resolve().parent.parent / "kostman.db"

# env var -> default
POOL_SETTINGS = {
    "pool_size": ("DATABASE_POOL_SIZE", 5),
    "max_overflow": ("DATABASE_MAX_OVERFLOW", 10),
    "pool_timeout": ("DATABASE_POOL_TIMEOUT", 30),
    "pool_recycle": ("DATABASE_POOL_RECYCLE", 1800),
}
CONNECT_TIMEOUT_SETTING = ("DATABASE_CONNECT_TIMEOUT", 10)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _env_non_negative_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def resolve_database_url(raw_url: str | None = None) -> str:
    """Return the URL the engine should use, creating SQLite parent folders."""

    require_postgres = _env_flag("REQUIRE_POSTGRES")
    if not raw_url:
        if require_postgres:
            raise RuntimeError("REQUIRE_POSTGRES=1 but DATABASE_URL is not set")
        DEFAULT_SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{DEFAULT_SQLITE_PATH.as_posix()}"

    url = make_url(raw_url)
    if url.drivername.startswith("sqlite"):
        if require_postgres:
            raise RuntimeError("REQUIRE_POSTGRES=1 does not allow a SQLite DATABASE_URL")
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return url.render_as_string(hide_password=False)


def build_engine_kwargs(database_url: str) -> Dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    kwargs: Dict[str, Any] = {"pool_pre_ping": True}
    for option, (env_name, default) in POOL_SETTINGS.items():
        kwargs[option] = _env_non_negative_int(env_name, default)
    env_name, default = CONNECT_TIMEOUT_SETTING
    kwargs["connect_args"] = {"connect_timeout": _env_non_negative_int(env_name, default)}
    return kwargs


SQLALCHEMY_DATABASE_URL = resolve_database_url(os.getenv("DATABASE_URL"))

engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL, **build_engine_kwargs(SQLALCHEMY_DATABASE_URL)
)

if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
