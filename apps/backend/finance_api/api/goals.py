from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.database import get_db
from finance_api.core.deps import get_current_user
from finance_api.schemas import GoalCreate, GoalOut, GoalProgressIn, GoalUpdate
from finance_api.services.goal_service import GoalService


router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalOut, status_code=201)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return GoalService(db).create(current_user.id, payload)


@router.get("", response_model=list[GoalOut])
def list_goals(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return GoalService(db).get_all(current_user.id)


@router.get("/{goal_id}", response_model=GoalOut)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return GoalService(db).get(current_user.id, goal_id)


@router.put("/{goal_id}", response_model=GoalOut)
def update_goal(
    goal_id: int,
    payload: GoalUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return GoalService(db).update(current_user.id, goal_id, payload)


@router.post("/{goal_id}/progress", response_model=GoalOut)
def add_goal_progress(
    goal_id: int,
    payload: GoalProgressIn,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return GoalService(db).add_progress(current_user.id, goal_id, payload.amount)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    GoalService(db).delete(current_user.id, goal_id)
    return Response(status_code=204)
