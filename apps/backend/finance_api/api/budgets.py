from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.database import get_db
from finance_api.core.deps import get_current_user
from finance_api.schemas import BudgetCreate, BudgetOut, BudgetSummaryOut, BudgetUpdate
from finance_api.services.budget_service import BudgetService


router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.post("", response_model=BudgetOut, status_code=201)
def create_budget(
    payload: BudgetCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return BudgetService(db).create(current_user.id, payload)


@router.get("", response_model=list[BudgetOut])
def list_budgets(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return BudgetService(db).list_active(current_user.id)


@router.get("/{budget_id}", response_model=BudgetOut)
def get_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return BudgetService(db).get(current_user.id, budget_id)


@router.get("/{budget_id}/summary", response_model=BudgetSummaryOut)
def get_budget_summary(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return BudgetService(db).summary(current_user.id, budget_id)


@router.put("/{budget_id}", response_model=BudgetOut)
def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return BudgetService(db).update(current_user.id, budget_id, payload)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    BudgetService(db).delete(current_user.id, budget_id)
    return Response(status_code=204)
