from __future__ import annotations

import logging
from decimal import Decimal
from threading import Lock
from weakref import WeakValueDictionary

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.errors import NotFoundError, ValidationError
from finance_api.schemas import BudgetCreate, BudgetUpdate
from finance_api.services.category_service import CategoryService


logger = logging.getLogger(__name__)


_LOCKS_GUARD = Lock()
# entries vanish once no caller holds the lock
_RECOMPUTE_LOCKS: "WeakValueDictionary[tuple[int, int], Lock]" = WeakValueDictionary()


def recompute_lock(user_id: int, category_id: int) -> Lock:
    """Return the process-wide lock serialising recomputes of one (owner, category)."""
    key = (user_id, category_id)
    with _LOCKS_GUARD:
        lock = _RECOMPUTE_LOCKS.get(key)
        if lock is None:
            lock = Lock()
            _RECOMPUTE_LOCKS[key] = lock
        return lock


def _spent_subquery():
    """Sum of the owner's expense transactions inside the budget window.

    Correlated against the ``budget`` row being updated so the whole
    recompute is one UPDATE statement.
    """
    txn = models.Transaction
    budget = models.Budget
    return (
        select(func.round(func.coalesce(func.sum(txn.amount), 0), 2))
        .where(
            txn.user_id == budget.user_id,
            txn.category_id == budget.category_id,
            txn.kind == models.TxnKind.EXPENSE,
            txn.date >= budget.start_date,
            txn.date <= budget.end_date,
        )
        .correlate(budget)
        .scalar_subquery()
    )


class BudgetService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_active(self, user_id: int) -> list[models.Budget]:
        return (
            self.db.query(models.Budget)
            .filter(models.Budget.user_id == user_id, models.Budget.is_active.is_(True))
            .order_by(models.Budget.created_at.desc(), models.Budget.id.desc())
            .all()
        )

    def get(self, user_id: int, budget_id: int) -> models.Budget:
        row = (
            self.db.query(models.Budget)
            .filter(models.Budget.id == budget_id, models.Budget.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Budget not found")
        return row

    def create(self, user_id: int, payload: BudgetCreate) -> models.Budget:
        category = CategoryService(self.db).get(user_id, payload.category_id)
        if category.kind is not models.TxnKind.EXPENSE:
            raise ValidationError("Budgets can only be set on expense categories")
        row = models.Budget(
            user_id=user_id,
            category_id=category.id,
            amount=payload.amount,
            spent=Decimal("0"),
            period=payload.period,
            start_date=payload.start_date,
            end_date=payload.end_date,
            alert_threshold=payload.alert_threshold,
            is_active=True,
        )
        self.db.add(row)
        self.db.commit()
        self.recompute_spent(user_id, category.id)
        self.db.refresh(row)
        logger.info("budget %s created for user %s", row.id, user_id)
        return row

    def update(self, user_id: int, budget_id: int, payload: BudgetUpdate) -> models.Budget:
        row = self.get(user_id, budget_id)
        start = payload.start_date if payload.start_date is not None else row.start_date
        end = payload.end_date if payload.end_date is not None else row.end_date
        if start > end:
            raise ValidationError("start_date must be on or before end_date")

        if payload.amount is not None:
            row.amount = payload.amount
        if payload.period is not None:
            row.period = payload.period
        if payload.alert_threshold is not None:
            row.alert_threshold = payload.alert_threshold
        if payload.is_active is not None:
            row.is_active = payload.is_active
        row.start_date = start
        row.end_date = end
        self.db.commit()
        self.recompute_spent(user_id, row.category_id)
        self.db.refresh(row)
        return row

    def delete(self, user_id: int, budget_id: int) -> None:
        row = self.get(user_id, budget_id)
        self.db.delete(row)
        self.db.commit()

    def recompute_spent(self, user_id: int, category_id: int) -> int:
        """Refresh ``spent`` for every active budget of one owner and category.

        Runs as a single UPDATE with a correlated aggregate and commits
        immediately. Returns the number of budgets touched.
        """
        stmt = (
            update(models.Budget)
            .where(
                models.Budget.user_id == user_id,
                models.Budget.category_id == category_id,
                models.Budget.is_active.is_(True),
            )
            .values(spent=_spent_subquery())
            .execution_options(synchronize_session=False)
        )
        with recompute_lock(user_id, category_id):
            try:
                touched = self.db.execute(stmt).rowcount or 0
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("budget recompute failed for user %s category %s", user_id, category_id)
                raise
        if touched:
            logger.debug("recomputed %d budget(s) for user %s category %s", touched, user_id, category_id)
        return touched

    def compute_spent(self, budget: models.Budget) -> Decimal:
        """Aggregate the ledger for one budget window without writing anything."""
        total = self.db.execute(
            select(func.coalesce(func.sum(models.Transaction.amount), 0)).where(
                models.Transaction.user_id == budget.user_id,
                models.Transaction.category_id == budget.category_id,
                models.Transaction.kind == models.TxnKind.EXPENSE,
                models.Transaction.date >= budget.start_date,
                models.Transaction.date <= budget.end_date,
            )
        ).scalar_one()
        return models.to_money(total)

    def summary(self, user_id: int, budget_id: int) -> dict:
        row = self.get(user_id, budget_id)
        spent = self.compute_spent(row)
        planned = models.to_money(row.amount)
        execution = float(spent / planned * 100) if planned else 0.0
        return {
            "budget_id": row.id,
            "category_name": row.category_name,
            "period_start": row.start_date,
            "period_end": row.end_date,
            "planned": float(planned),
            "spent": float(spent),
            "remaining": float(planned - spent),
            "execution_rate": execution,
            "is_over_threshold": execution >= float(row.alert_threshold),
        }
