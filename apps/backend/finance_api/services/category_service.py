from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.errors import ConflictError, ForbiddenError, NotFoundError
from finance_api.schemas import CategoryCreate, CategoryUpdate


logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES: tuple[tuple[str, models.TxnKind, str, str], ...] = (
    ("Salary", models.TxnKind.INCOME, "#10b981", "💰"),
    ("Investment", models.TxnKind.INCOME, "#3b82f6", "📈"),
    ("Food & Dining", models.TxnKind.EXPENSE, "#ef4444", "🍕"),
    ("Transportation", models.TxnKind.EXPENSE, "#f59e0b", "🚗"),
    ("Utilities", models.TxnKind.EXPENSE, "#8b5cf6", "⚡"),
    ("Entertainment", models.TxnKind.EXPENSE, "#ec4899", "🎬"),
    ("Healthcare", models.TxnKind.EXPENSE, "#06b6d4", "🏥"),
    ("Shopping", models.TxnKind.EXPENSE, "#84cc16", "🛒"),
)


def _visible_to(user_id: int):
    return or_(models.Category.is_default.is_(True), models.Category.user_id == user_id)


class CategoryService:
    """Owns system-default and user-defined categories."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_visible(self, user_id: int, *, kind: Optional[models.TxnKind] = None) -> list[models.Category]:
        q = self.db.query(models.Category).filter(_visible_to(user_id))
        if kind is not None:
            q = q.filter(models.Category.kind == kind)
        return q.order_by(models.Category.name.asc(), models.Category.id.asc()).all()

    def get(self, user_id: int, category_id: int) -> models.Category:
        row = (
            self.db.query(models.Category)
            .filter(models.Category.id == category_id, _visible_to(user_id))
            .first()
        )
        if not row:
            raise NotFoundError("Category not found")
        return row

    def find_by_name(
        self,
        user_id: int,
        name: str,
        kind: models.TxnKind,
        *,
        exclude_id: Optional[int] = None,
    ) -> models.Category | None:
        q = self.db.query(models.Category).filter(
            func.lower(models.Category.name) == name.strip().lower(),
            models.Category.kind == kind,
            _visible_to(user_id),
        )
        if exclude_id is not None:
            q = q.filter(models.Category.id != exclude_id)
        return q.first()

    def create(self, user_id: int, payload: CategoryCreate) -> models.Category:
        if self.find_by_name(user_id, payload.name, payload.kind):
            raise ConflictError("Category with this name already exists for this type")
        row = models.Category(
            user_id=user_id,
            name=payload.name,
            kind=payload.kind,
            color=payload.color,
            icon=payload.icon,
            is_default=False,
        )
        self.db.add(row)
        self._commit_unique()
        self.db.refresh(row)
        logger.info("category %s created for user %s", row.id, user_id)
        return row

    def update(self, user_id: int, category_id: int, payload: CategoryUpdate) -> models.Category:
        row = self.get(user_id, category_id)
        if row.is_default:
            raise ForbiddenError("Cannot update default categories")
        if payload.name is not None:
            if self.find_by_name(user_id, payload.name, row.kind, exclude_id=row.id):
                raise ConflictError("Category with this name already exists for this type")
            row.name = payload.name
        if payload.color is not None:
            row.color = payload.color
        if payload.icon is not None:
            row.icon = payload.icon
        self._commit_unique()
        self.db.refresh(row)
        return row

    def _commit_unique(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent create or rename
            self.db.rollback()
            raise ConflictError("Category with this name already exists for this type") from exc

    def delete(self, user_id: int, category_id: int) -> None:
        row = self.get(user_id, category_id)
        if row.is_default:
            raise ForbiddenError("Cannot delete default categories")
        in_use = (
            self.db.query(models.Transaction.id)
            .filter(models.Transaction.category_id == row.id)
            .first()
        )
        if in_use:
            raise ConflictError(
                "Cannot delete category that has transactions. Please reassign or delete transactions first."
            )
        # budgets on this category go with it
        self.db.query(models.Budget).filter(models.Budget.category_id == row.id).delete(synchronize_session=False)
        self.db.delete(row)
        self.db.commit()
        logger.info("category %s deleted for user %s", category_id, user_id)

    def usage_stats(self, user_id: int) -> list[dict]:
        txn_count = func.count(models.Transaction.id)
        rows = (
            self.db.query(
                models.Category.id,
                models.Category.name,
                models.Category.kind,
                models.Category.color,
                models.Category.icon,
                txn_count.label("transaction_count"),
                func.coalesce(func.sum(models.Transaction.amount), 0).label("total_amount"),
            )
            .outerjoin(
                models.Transaction,
                (models.Transaction.category_id == models.Category.id)
                & (models.Transaction.user_id == user_id),
            )
            .filter(_visible_to(user_id))
            .group_by(
                models.Category.id,
                models.Category.name,
                models.Category.kind,
                models.Category.color,
                models.Category.icon,
            )
            .order_by(txn_count.desc(), models.Category.name.asc())
            .all()
        )
        return [
            {
                "id": r.id,
                "name": r.name,
                "kind": r.kind,
                "color": r.color,
                "icon": r.icon,
                "transaction_count": int(r.transaction_count or 0),
                "total_amount": float(models.to_money(r.total_amount)),
            }
            for r in rows
        ]

    def seed_defaults(self) -> list[models.Category]:
        """Insert the system-default categories when none exist yet."""
        existing = self.db.query(models.Category.id).filter(models.Category.is_default.is_(True)).first()
        if existing:
            return []
        rows = [
            models.Category(name=name, kind=kind, color=color, icon=icon, is_default=True, user_id=None)
            for name, kind, color, icon in DEFAULT_CATEGORIES
        ]
        self.db.add_all(rows)
        self.db.commit()
        logger.info("seeded %d default categories", len(rows))
        return rows
