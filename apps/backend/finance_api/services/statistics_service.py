from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from finance_api import models


def month_bounds(day: dt.date) -> tuple[dt.date, dt.date]:
    """Return [first day of month, first day of next month) for ``day``."""
    start = day.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class StatisticsService:
    """Read-only rollups over the ledger, computed on every call."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _totals_by_kind(self, user_id: int, *filters) -> dict[models.TxnKind, Decimal]:
        rows = (
            self.db.query(models.Transaction.kind, func.sum(models.Transaction.amount))
            .filter(models.Transaction.user_id == user_id, *filters)
            .group_by(models.Transaction.kind)
            .all()
        )
        totals = {models.TxnKind.INCOME: models.to_money(0), models.TxnKind.EXPENSE: models.to_money(0)}
        for kind, total in rows:
            totals[models.TxnKind(kind)] = models.to_money(total)
        return totals

    def get_stats(self, user_id: int, today: Optional[dt.date] = None) -> dict:
        today = today or models.today_local()
        month_start, next_month = month_bounds(today)

        totals = self._totals_by_kind(user_id)
        monthly = self._totals_by_kind(
            user_id,
            models.Transaction.date >= month_start,
            models.Transaction.date < next_month,
        )

        amount = func.sum(models.Transaction.amount).label("amount")
        breakdown = (
            self.db.query(models.Category.name, models.Transaction.kind, amount)
            .join(models.Category, models.Transaction.category_id == models.Category.id)
            .filter(models.Transaction.user_id == user_id)
            .group_by(models.Category.name, models.Transaction.kind)
            .order_by(amount.desc(), models.Category.name.asc())
            .all()
        )

        income = totals[models.TxnKind.INCOME]
        expenses = totals[models.TxnKind.EXPENSE]
        return {
            "total_income": float(income),
            "total_expenses": float(expenses),
            "balance": float(income - expenses),
            "monthly_income": float(monthly[models.TxnKind.INCOME]),
            "monthly_expenses": float(monthly[models.TxnKind.EXPENSE]),
            "category_breakdown": [
                {"category": name, "kind": kind, "amount": float(models.to_money(total))}
                for name, kind, total in breakdown
            ],
        }
