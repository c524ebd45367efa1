from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.errors import NotFoundError
from finance_api.schemas import GoalCreate, GoalUpdate


logger = logging.getLogger(__name__)


_PRIORITY_RANK = case(
    (models.Goal.priority == models.GoalPriority.HIGH, 0),
    (models.Goal.priority == models.GoalPriority.MEDIUM, 1),
    else_=2,
)


def completion_expr(current, target):
    """The only place the goal completion rule is written down.

    Both sides are rounded to cents so REAL storage on SQLite cannot turn
    0.70 + 0.10 into something below 0.80.
    """
    return func.round(current, 2) >= func.round(target, 2)


class GoalService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_all(self, user_id: int) -> list[models.Goal]:
        return (
            self.db.query(models.Goal)
            .filter(models.Goal.user_id == user_id)
            .order_by(_PRIORITY_RANK, models.Goal.target_date.asc(), models.Goal.id.asc())
            .all()
        )

    def get(self, user_id: int, goal_id: int) -> models.Goal:
        row = (
            self.db.query(models.Goal)
            .filter(models.Goal.id == goal_id, models.Goal.user_id == user_id)
            .first()
        )
        if not row:
            raise NotFoundError("Goal not found")
        return row

    def create(self, user_id: int, payload: GoalCreate) -> models.Goal:
        row = models.Goal(
            user_id=user_id,
            title=payload.title,
            description=payload.description,
            target_amount=payload.target_amount,
            current_amount=Decimal("0"),
            target_date=payload.target_date,
            priority=payload.priority,
            is_completed=False,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info("goal %s created for user %s", row.id, user_id)
        return row

    def add_progress(self, user_id: int, goal_id: int, amount: Decimal) -> models.Goal:
        """Atomically add ``amount`` to the goal and re-derive completion."""
        new_current = func.round(models.Goal.current_amount + amount, 2)
        stmt = (
            update(models.Goal)
            .where(models.Goal.id == goal_id, models.Goal.user_id == user_id)
            .values(
                current_amount=new_current,
                is_completed=completion_expr(new_current, models.Goal.target_amount),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if not result.rowcount:
            self.db.rollback()
            raise NotFoundError("Goal not found")
        self.db.commit()
        return self.get(user_id, goal_id)

    def update(self, user_id: int, goal_id: int, payload: GoalUpdate) -> models.Goal:
        values: dict = {}
        if payload.title is not None:
            values["title"] = payload.title
        if payload.description is not None:
            values["description"] = payload.description
        if payload.target_date is not None:
            values["target_date"] = payload.target_date
        if payload.priority is not None:
            values["priority"] = payload.priority
        if payload.target_amount is not None:
            values["target_amount"] = payload.target_amount
        if payload.current_amount is not None:
            values["current_amount"] = payload.current_amount
        if payload.target_amount is not None or payload.current_amount is not None:
            current = payload.current_amount if payload.current_amount is not None else models.Goal.current_amount
            target = payload.target_amount if payload.target_amount is not None else models.Goal.target_amount
            values["is_completed"] = completion_expr(current, target)

        if not values:
            return self.get(user_id, goal_id)

        stmt = (
            update(models.Goal)
            .where(models.Goal.id == goal_id, models.Goal.user_id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if not result.rowcount:
            self.db.rollback()
            raise NotFoundError("Goal not found")
        self.db.commit()
        return self.get(user_id, goal_id)

    def delete(self, user_id: int, goal_id: int) -> None:
        row = self.get(user_id, goal_id)
        self.db.delete(row)
        self.db.commit()
