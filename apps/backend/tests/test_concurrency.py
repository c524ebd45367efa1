from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from finance_api import models
from finance_api.schemas import BudgetCreate, GoalCreate, TransactionCreate
from finance_api.services import BudgetService, GoalService, TransactionService


def test_concurrent_goal_progress_loses_no_updates(db_session, session_factory, demo_user):
    goal = GoalService(db_session).create(
        demo_user.id,
        GoalCreate(title="jar", target_amount=Decimal("100"), target_date=dt.date(2025, 1, 1)),
    )
    user_id, goal_id = demo_user.id, goal.id

    def add_one(_):
        session = session_factory()
        try:
            GoalService(session).add_progress(user_id, goal_id, Decimal("1"))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(add_one, range(100)))

    db_session.expire_all()
    final = GoalService(db_session).get(user_id, goal_id)
    assert final.current_amount == Decimal("100")
    assert final.is_completed is True


def test_concurrent_ledger_writes_leave_budget_consistent(db_session, session_factory, demo_user):
    food = db_session.query(models.Category).filter_by(name="Food & Dining").one()
    budget = BudgetService(db_session).create(
        demo_user.id,
        BudgetCreate(
            category_id=food.id,
            amount=Decimal("1000"),
            period=models.BudgetPeriod.MONTHLY,
            start_date=dt.date(2024, 3, 1),
            end_date=dt.date(2024, 3, 31),
        ),
    )
    user_id, category_id, budget_id = demo_user.id, food.id, budget.id

    def write(i):
        session = session_factory()
        try:
            TransactionService(session).create(
                user_id,
                TransactionCreate(
                    amount=Decimal("2.50"),
                    kind=models.TxnKind.EXPENSE,
                    category_id=category_id,
                    description=f"txn {i}",
                    date=dt.date(2024, 3, 1 + i % 28),
                ),
            )
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=6) as pool:
        list(pool.map(write, range(24)))

    db_session.expire_all()
    row = BudgetService(db_session).get(user_id, budget_id)
    assert row.spent == Decimal("60.00")
    assert BudgetService(db_session).compute_spent(row) == row.spent
