from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from finance_api import models
from finance_api.core.database import get_db
from finance_api.core.deps import get_current_user
from finance_api.core.errors import ValidationError
from finance_api.schemas import CategoryCreate, CategoryOut, CategoryUpdate, CategoryUsageOut
from finance_api.services.category_service import CategoryService


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).list_visible(current_user.id)


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).create(current_user.id, payload)


@router.get("/stats", response_model=list[CategoryUsageOut])
def category_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).usage_stats(current_user.id)


@router.get("/type/{kind}", response_model=list[CategoryOut])
def list_categories_by_type(
    kind: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        parsed = models.TxnKind(kind.strip().lower())
    except ValueError as exc:
        raise ValidationError("Invalid category type. Must be 'income' or 'expense'") from exc
    return CategoryService(db).list_visible(current_user.id, kind=parsed)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).get(current_user.id, category_id)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).update(current_user.id, category_id, payload)


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    CategoryService(db).delete(current_user.id, category_id)
    return Response(status_code=204)
