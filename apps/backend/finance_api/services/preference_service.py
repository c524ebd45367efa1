from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.schemas import PreferenceUpdate


class PreferenceService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_or_create(self, user_id: int) -> models.UserPreference:
        row = self.db.query(models.UserPreference).filter(models.UserPreference.user_id == user_id).first()
        if row:
            return row
        row = models.UserPreference(user_id=user_id, currency=models.Currency.USD, theme=models.Theme.LIGHT)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # a concurrent request created the row first
            self.db.rollback()
            return self.db.query(models.UserPreference).filter(models.UserPreference.user_id == user_id).one()
        self.db.refresh(row)
        return row

    def upsert(self, user_id: int, payload: PreferenceUpdate) -> models.UserPreference:
        row = self.get_or_create(user_id)
        if payload.currency is not None:
            row.currency = payload.currency
        if payload.theme is not None:
            row.theme = payload.theme
        self.db.commit()
        self.db.refresh(row)
        return row
