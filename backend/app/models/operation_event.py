"""Audit rows for bill and payment requests that were rejected or failed."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, JSON, Numeric, String, Text, func

from ..database import Base
from ..db_types import GUID, new_id


class OperationEvent(Base):
    """Outcome of one billing operation, written outside the request transaction."""

    __tablename__ = "operation_events"

    id = Column("operation_event_id", GUID(), primary_key=True, default=new_id)
    operation = Column(String(120), nullable=False)
    outcome = Column(String(16), nullable=False)
    reason = Column(Text, nullable=True)
    duration_ms = Column(Numeric(12, 3), nullable=True)
    labels = Column(JSON, nullable=False, default=dict)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("operation_events_operation_idx", OperationEvent.operation, OperationEvent.recorded_at)
Index("operation_events_outcome_idx", OperationEvent.outcome)
