from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.errors import NotFoundError, ValidationError
from finance_api.schemas import TransactionCreate, TransactionUpdate
from finance_api.services.budget_service import BudgetService
from finance_api.services.category_service import CategoryService


logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class TransactionFilters:
    kind: Optional[models.TxnKind] = None
    category_id: Optional[int] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


class TransactionService:
    """Owner-scoped ledger of money movements.

    Every write is followed by a budget recompute for each category it
    touched, so cached budget figures never lag behind the ledger.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.budgets = BudgetService(db)
        self.categories = CategoryService(db)

    def create(self, user_id: int, payload: TransactionCreate) -> models.Transaction:
        category = self.categories.get(user_id, payload.category_id)
        row = models.Transaction(
            user_id=user_id,
            amount=payload.amount,
            kind=payload.kind,
            category_id=category.id,
            description=payload.description,
            date=payload.date,
            is_recurring=payload.is_recurring,
            recurring_period=payload.recurring_period if payload.is_recurring else None,
            recurring_end_date=payload.recurring_end_date if payload.is_recurring else None,
        )
        self.db.add(row)
        self.db.commit()
        self.budgets.recompute_spent(user_id, category.id)
        self.db.refresh(row)
        logger.info("transaction %s created for user %s", row.id, user_id)
        return row

    def get_page(
        self,
        user_id: int,
        filters: TransactionFilters,
        *,
        page: int = 1,
        page_size: int = 20,
    ) -> dict:
        if page < 1:
            raise ValidationError("page must be a positive integer")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise ValidationError("start_date must be on or before end_date")

        q = self.db.query(models.Transaction).filter(models.Transaction.user_id == user_id)
        if filters.kind is not None:
            q = q.filter(models.Transaction.kind == filters.kind)
        if filters.category_id is not None:
            q = q.filter(models.Transaction.category_id == filters.category_id)
        if filters.start_date is not None:
            q = q.filter(models.Transaction.date >= filters.start_date)
        if filters.end_date is not None:
            q = q.filter(models.Transaction.date <= filters.end_date)

        total = q.count()
        rows = (
            q.order_by(
                models.Transaction.date.desc(),
                models.Transaction.created_at.desc(),
                models.Transaction.id.desc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return {
            "items": rows,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    def get(self, user_id: int, txn_id: int) -> models.Transaction:
        row = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.id == txn_id, models.Transaction.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Transaction not found")
        return row

    def update(self, user_id: int, txn_id: int, payload: TransactionUpdate) -> models.Transaction:
        row = self.get(user_id, txn_id)
        old_category_id = row.category_id
        fields = payload.model_fields_set

        if payload.category_id is not None:
            row.category_id = self.categories.get(user_id, payload.category_id).id
        if payload.amount is not None:
            row.amount = payload.amount
        if payload.kind is not None:
            row.kind = payload.kind
        if payload.description is not None:
            row.description = payload.description
        if payload.date is not None:
            row.date = payload.date
        if payload.is_recurring is not None:
            row.is_recurring = payload.is_recurring
        if "recurring_period" in fields:
            row.recurring_period = payload.recurring_period
        if "recurring_end_date" in fields:
            row.recurring_end_date = payload.recurring_end_date

        try:
            self._check_recurring(row)
        except ValidationError:
            self.db.rollback()
            raise

        self.db.commit()
        for category_id in {old_category_id, row.category_id}:
            self.budgets.recompute_spent(user_id, category_id)
        self.db.refresh(row)
        return row

    def delete(self, user_id: int, txn_id: int) -> None:
        row = self.get(user_id, txn_id)
        category_id = row.category_id
        self.db.delete(row)
        self.db.commit()
        self.budgets.recompute_spent(user_id, category_id)
        logger.info("transaction %s deleted for user %s", txn_id, user_id)

    @staticmethod
    def _check_recurring(row: models.Transaction) -> None:
        if not row.is_recurring:
            row.recurring_period = None
            row.recurring_end_date = None
            return
        if row.recurring_period is None:
            raise ValidationError("recurring_period is required when is_recurring is true")
        if row.recurring_end_date is not None and row.recurring_end_date < row.date:
            raise ValidationError("recurring_end_date must not be before date")
