"""Apply Alembic migrations for the KostMan database under a cross-process lock."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy.engine import make_url

from .database import SQLALCHEMY_DATABASE_URL

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl
else:  # pragma: no cover - platform specific
    import msvcrt

LOGGER = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parent.parent
LOCK_PATH = BACKEND_DIR / ".alembic-migration.lock"
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

# Windows ERROR_SHARING_VIOLATION / ERROR_LOCK_VIOLATION
_BUSY_WINERRORS = {32, 33}
_BUSY_ERRNOS = {errno.EACCES, errno.EAGAIN, errno.EBUSY}


def lock_timeout_from_env() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        LOGGER.warning(
            "Ignoring %s=%r; waiting %.1f seconds for the migration lock",
            LOCK_TIMEOUT_ENV,
            raw,
            DEFAULT_LOCK_TIMEOUT,
        )
        return DEFAULT_LOCK_TIMEOUT
    return value


class MigrationLock:
    """Exclusive file lock so concurrent workers do not migrate at the same time."""

    poll_interval = 0.25

    def __init__(self, path: Path = LOCK_PATH, timeout: Optional[float] = None) -> None:
        self.path = path
        self.timeout = lock_timeout_from_env() if timeout is None else timeout
        self._handle = None

    def __enter__(self) -> "MigrationLock":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("a+")
        deadline = time.monotonic() + self.timeout
        while not self._try_lock():
            if time.monotonic() >= deadline:
                self._handle.close()
                self._handle = None
                raise TimeoutError(f"Timed out waiting for migration lock {self.path}")
            time.sleep(self.poll_interval)
        LOGGER.debug("Holding migration lock %s", self.path)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._handle is None:
            return
        try:
            if os.name == "posix":  # pragma: no cover - platform specific
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
            else:  # pragma: no cover - platform specific
                msvcrt.locking(self._handle.fileno(), msvcrt.LK_UNLCK, 1)
        except OSError:  # pragma: no cover - closing the handle releases it too
            LOGGER.debug("Explicit unlock of %s failed", self.path)
        finally:
            self._handle.close()
            self._handle = None

    def _try_lock(self) -> bool:
        try:
            if os.name == "posix":  # pragma: no cover - platform specific
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            else:  # pragma: no cover - platform specific
                msvcrt.locking(self._handle.fileno(), msvcrt.LK_NBLCK, 1)
        except BlockingIOError:
            return False
        except OSError as error:
            if error.errno in _BUSY_ERRNOS or getattr(error, "winerror", None) in _BUSY_WINERRORS:
                return False
            raise
        return True


def build_alembic_config(database_url: str | None = None) -> Config:
    """Return an Alembic config pointing at the backend scripts and target database."""

    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    config.set_main_option(
        "sqlalchemy.url", database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    )
    return config


def run_database_migrations(database_url: str | None = None) -> str | None:
    """Upgrade the KostMan schema to the head revision and return that revision.

    Several API workers may start at once; only the one holding the
    migration lock upgrades, the others wait and then find nothing to do.
    """

    if str(BACKEND_DIR.parent) not in sys.path:
        sys.path.insert(0, str(BACKEND_DIR.parent))

    config = build_alembic_config(database_url)
    final_url = config.get_main_option("sqlalchemy.url")
    head_revision = ScriptDirectory.from_config(config).get_current_head()
    LOGGER.info("Migrating %s to revision %s", make_safe_url(final_url), head_revision)

    with MigrationLock():
        command.upgrade(config, "head")

    return head_revision


def make_safe_url(database_url: str) -> str:
    return make_url(database_url).render_as_string(hide_password=True)
