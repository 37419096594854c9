"""Recording and querying operating expenses."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from .. import models, schemas
from .errors import NotFoundError, ValidationError
from .properties import PropertyService

LOGGER = logging.getLogger(__name__)


def _apply_filters(
    query: Query,
    *,
    property_id: Optional[str],
    category: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
    min_amount: Optional[Decimal],
    max_amount: Optional[Decimal],
) -> Query:
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date cannot be after end_date")
    if min_amount is not None and max_amount is not None and min_amount > max_amount:
        raise ValidationError("min_amount cannot be greater than max_amount")

    expense = models.Expense
    if property_id:
        query = query.filter(expense.property_id == property_id)
    if category and category.strip():
        # Categories are free text, match them case-insensitively.
        query = query.filter(func.lower(expense.category) == category.strip().lower())
    if start_date:
        query = query.filter(expense.expense_date >= start_date)
    if end_date:
        query = query.filter(expense.expense_date <= end_date)
    if min_amount is not None:
        query = query.filter(expense.amount >= min_amount)
    if max_amount is not None:
        query = query.filter(expense.amount <= max_amount)
    return query


class ExpenseService:
    @staticmethod
    def list_expenses(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        property_id: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
    ) -> Tuple[List[models.Expense], int]:
        """Return one page of expenses, newest first, and the filtered total."""

        query = _apply_filters(
            db.query(models.Expense),
            property_id=property_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
            min_amount=min_amount,
            max_amount=max_amount,
        )
        total = query.count()
        items = (
            query.order_by(models.Expense.expense_date.desc(), models.Expense.created_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_expense(db: Session, expense_id: str) -> models.Expense:
        expense = db.get(models.Expense, expense_id)
        if expense is None:
            raise NotFoundError("Expense not found", context={"expense_id": expense_id})
        return expense

    @staticmethod
    def create_expense(db: Session, data: schemas.ExpenseCreate) -> models.Expense:
        if data.property_id:
            PropertyService.get_property(db, data.property_id)
        expense = models.Expense(**data.model_dump())
        db.add(expense)
        db.commit()
        db.refresh(expense)
        LOGGER.info("Expense %s recorded: %s %s", expense.id, expense.category, expense.amount)
        return expense

    @classmethod
    def update_expense(cls, db: Session, expense_id: str, data: schemas.ExpenseUpdate) -> models.Expense:
        expense = cls.get_expense(db, expense_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("property_id"):
            PropertyService.get_property(db, updates["property_id"])

        for field, value in updates.items():
            setattr(expense, field, value)
        db.add(expense)
        db.commit()
        db.refresh(expense)
        LOGGER.info("Expense %s updated: %s", expense_id, ", ".join(sorted(updates)) or "no changes")
        return expense

    @classmethod
    def delete_expense(cls, db: Session, expense_id: str) -> None:
        expense = cls.get_expense(db, expense_id)
        db.delete(expense)
        db.commit()
        LOGGER.info("Expense %s deleted", expense_id)
