from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.database import get_db
from finance_api.core.deps import get_current_user
from finance_api.schemas import (
    TransactionCreate,
    TransactionOut,
    TransactionPageOut,
    TransactionStatsOut,
    TransactionUpdate,
)
from finance_api.services.statistics_service import StatisticsService
from finance_api.services.transaction_service import MAX_PAGE_SIZE, TransactionFilters, TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionOut, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).create(current_user.id, payload)


@router.get("", response_model=TransactionPageOut)
def list_transactions(
    type: Optional[models.TxnKind] = Query(None, description="income or expense"),
    category_id: Optional[int] = Query(None),
    start_date: Optional[dt.date] = Query(None),
    end_date: Optional[dt.date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    filters = TransactionFilters(kind=type, category_id=category_id, start_date=start_date, end_date=end_date)
    return TransactionService(db).get_page(current_user.id, filters, page=page, page_size=page_size)


# must stay above /{txn_id}
@router.get("/stats", response_model=TransactionStatsOut)
def transaction_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return StatisticsService(db).get_stats(current_user.id)


@router.get("/{txn_id}", response_model=TransactionOut)
def get_transaction(
    txn_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).get(current_user.id, txn_id)


@router.put("/{txn_id}", response_model=TransactionOut)
def update_transaction(
    txn_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).update(current_user.id, txn_id, payload)


@router.delete("/{txn_id}", status_code=204)
def delete_transaction(
    txn_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    TransactionService(db).delete(current_user.id, txn_id)
    return Response(status_code=204)
