from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.database import get_db
from finance_api.core.deps import get_current_user
from finance_api.schemas import PreferenceOut, PreferenceUpdate
from finance_api.services.preference_service import PreferenceService


router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=PreferenceOut)
def get_preferences(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return PreferenceService(db).get_or_create(current_user.id)


@router.put("", response_model=PreferenceOut)
def update_preferences(
    payload: PreferenceUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return PreferenceService(db).upsert(current_user.id, payload)
