"""Records rejected and failed billing operations for later auditing."""

from __future__ import annotations

import enum
import logging
from decimal import Decimal
from time import perf_counter
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models

LOGGER = logging.getLogger(__name__)


class MetricOutcome(str, enum.Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    ERROR = "error"


def _elapsed_ms(started: Optional[float]) -> Optional[Decimal]:
    if started is None:
        return None
    return Decimal(str(round((perf_counter() - started) * 1000, 3)))


class ObservabilityService:
    """Stores one ``OperationEvent`` per rejected or failed bill/payment request.

    Events go through a separate session bound to the caller's engine, so a
    rejected request never commits (or loses) anything in the caller's
    transaction and a storage failure never reaches the caller.
    """

    @classmethod
    def record_rejection(
        cls,
        db: Session,
        operation: str,
        reason: str,
        *,
        labels: Optional[dict[str, Any]] = None,
        started: Optional[float] = None,
    ) -> None:
        LOGGER.warning("%s rejected: %s", operation, reason, extra={"labels": labels or {}})
        cls._store(db, operation, MetricOutcome.REJECTED, reason, labels, started)

    @classmethod
    def record_failure(
        cls,
        db: Session,
        operation: str,
        reason: str,
        *,
        labels: Optional[dict[str, Any]] = None,
        started: Optional[float] = None,
    ) -> None:
        cls._store(db, operation, MetricOutcome.ERROR, reason, labels, started)

    @staticmethod
    def _store(
        db: Session,
        operation: str,
        outcome: MetricOutcome,
        reason: str,
        labels: Optional[dict[str, Any]],
        started: Optional[float],
    ) -> None:
        event = models.OperationEvent(
            operation=operation,
            outcome=outcome.value,
            reason=reason,
            duration_ms=_elapsed_ms(started),
            labels=dict(labels or {}),
        )
        try:
            with Session(bind=db.get_bind()) as audit_session:
                audit_session.add(event)
                audit_session.commit()
        except SQLAlchemyError:
            LOGGER.exception("Could not store %s event for %s", outcome.value, operation)
