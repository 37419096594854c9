"""Column types shared by the KostMan models."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy.dialects import postgresql
from sqlalchemy.types import CHAR, TypeDecorator


def new_id() -> str:
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """UUID primary/foreign keys exposed to Python as plain strings.

    PostgreSQL gets a native ``UUID`` column; every other backend stores the
    canonical 36-character text form.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect) -> Optional[Any]:  # type: ignore[override]
        if value is None:
            return None
        if dialect.name != "postgresql":
            return str(value)
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))

    def process_result_value(self, value: Any, dialect) -> Optional[str]:  # type: ignore[override]
        return None if value is None else str(value)
