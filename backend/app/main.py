"""FastAPI entry point for KostMan: routers, CORS and startup migrations."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .migrations import run_database_migrations
from .routers import (
    bills_router,
    expenses_router,
    meter_readings_router,
    payments_router,
    properties_router,
    reminders_router,
    rooms_router,
    settings_router,
    tenants_router,
)

LOGGER = logging.getLogger(__name__)

ALLOWED_ORIGINS_ENV = "BACKEND_ALLOWED_ORIGINS"
DEV_SERVER_PORTS = (3000, 5173)
DEV_SERVER_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")
# Frontend dev servers stay allowed even when explicit origins are configured.
ALWAYS_ALLOWED_ORIGINS = tuple(f"http://localhost:{port}" for port in DEV_SERVER_PORTS)
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"


def _clean_origins(origins: Iterable[str]) -> list[str]:
    cleaned = {origin.strip().rstrip("/") for origin in origins}
    cleaned.discard("")
    return sorted(cleaned)


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split ``BACKEND_ALLOWED_ORIGINS`` on commas and/or whitespace."""

    return [part for part in re.split(r"[\s,]+", raw_value) if part]


def _load_allowed_origins_from_env() -> list[str]:
    return _clean_origins(_split_raw_origins(os.getenv(ALLOWED_ORIGINS_ENV, "")))


def _resolve_allowed_origins() -> list[str]:
    configured = _load_allowed_origins_from_env()
    if not configured:
        configured = [
            f"http://{host}:{port}" for host in DEV_SERVER_HOSTS for port in DEV_SERVER_PORTS
        ]
    return _clean_origins([*configured, *ALWAYS_ALLOWED_ORIGINS])


def _migrations_enabled() -> bool:
    raw = os.getenv("RUN_MIGRATIONS_ON_STARTUP")
    if raw is None:
        return True
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def ensure_database_is_ready() -> None:
    if not _migrations_enabled():
        LOGGER.info("RUN_MIGRATIONS_ON_STARTUP is off; not touching the schema")
        return
    revision = run_database_migrations()
    LOGGER.info("Database schema is at revision %s", revision)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_database_is_ready()
    yield


app = FastAPI(title="KostMan API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router, prefix in (
    (properties_router, "/properties"),
    (settings_router, "/settings"),
    (tenants_router, "/tenants"),
    (rooms_router, "/rooms"),
    (meter_readings_router, "/meter-readings"),
    (bills_router, "/bills"),
    (payments_router, "/payments"),
    (expenses_router, "/expenses"),
    (reminders_router, "/reminders"),
):
    app.include_router(router, prefix=prefix, tags=[prefix.strip("/")])


@app.get("/", tags=["health"])
def read_root() -> dict[str, str]:
    return {"status": "ok"}
