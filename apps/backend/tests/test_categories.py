from __future__ import annotations

import pytest
from sqlalchemy import func

from finance_api import models
from finance_api.core.errors import ConflictError
from finance_api.schemas import CategoryCreate
from finance_api.services import CategoryService


def _category_id(client, name: str) -> int:
    rows = client.get("/api/categories").json()
    return next(c["id"] for c in rows if c["name"] == name)


def test_defaults_visible_and_sorted(api):
    r = api.get("/api/categories")
    assert r.status_code == 200
    rows = r.json()
    names = [c["name"] for c in rows]
    assert "Salary" in names and "Food & Dining" in names
    assert names == sorted(names)
    assert all(c["is_default"] for c in rows)


def test_create_accepts_type_alias_and_lists_by_type(api):
    r = api.post(
        "/api/categories",
        json={"name": "Freelance", "type": "income", "color": "#112233", "icon": "💼"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["kind"] == "income"
    assert body["is_default"] is False

    incomes = api.get("/api/categories/type/income").json()
    assert {"Freelance", "Salary", "Investment"} <= {c["name"] for c in incomes}
    assert all(c["kind"] == "income" for c in incomes)

    r = api.get("/api/categories/type/transfer")
    assert r.status_code == 400
    assert "error" in r.json()


def test_duplicate_name_is_case_insensitive_per_kind(api):
    r = api.post("/api/categories", json={"name": "salary", "kind": "income", "color": "#000000", "icon": "x"})
    assert r.status_code == 409
    # same name under the other kind is fine
    r = api.post("/api/categories", json={"name": "Salary", "kind": "expense", "color": "#000000", "icon": "x"})
    assert r.status_code == 201


def test_invalid_color_rejected(api):
    r = api.post("/api/categories", json={"name": "Pets", "kind": "expense", "color": "red", "icon": "🐶"})
    assert r.status_code == 400
    assert r.json()["error"]


def test_update_rules(api):
    cat = api.post("/api/categories", json={"name": "Pets", "kind": "expense", "color": "#aabbcc", "icon": "🐶"}).json()

    # case-only rename of itself is not a conflict
    r = api.put(f"/api/categories/{cat['id']}", json={"name": "PETS"})
    assert r.status_code == 200
    assert r.json()["name"] == "PETS"

    r = api.put(f"/api/categories/{cat['id']}", json={"name": "Shopping"})
    assert r.status_code == 409

    r = api.put(f"/api/categories/{cat['id']}", json={"color": None})
    assert r.status_code == 400

    default_id = _category_id(api, "Utilities")
    r = api.put(f"/api/categories/{default_id}", json={"color": "#000000"})
    assert r.status_code == 403
    r = api.delete(f"/api/categories/{default_id}")
    assert r.status_code == 403


def test_delete_with_transactions_conflicts_and_leaves_data(api):
    cat = api.post("/api/categories", json={"name": "Hobby", "kind": "expense", "color": "#abcdef", "icon": "🎨"}).json()
    empty = api.post("/api/categories", json={"name": "Unused", "kind": "expense", "color": "#abcdef", "icon": "-"}).json()
    txn = api.post(
        "/api/transactions",
        json={"amount": 12, "type": "expense", "category_id": cat["id"], "description": "paint", "date": "2024-03-02"},
    ).json()

    r = api.delete(f"/api/categories/{cat['id']}")
    assert r.status_code == 409
    assert api.get(f"/api/categories/{cat['id']}").status_code == 200
    assert api.get(f"/api/transactions/{txn['id']}").status_code == 200

    r = api.delete(f"/api/categories/{empty['id']}")
    assert r.status_code == 204
    assert api.get(f"/api/categories/{empty['id']}").status_code == 404


def test_delete_category_removes_its_budgets(api):
    cat = api.post("/api/categories", json={"name": "Gym", "kind": "expense", "color": "#123456", "icon": "🏋"}).json()
    bd = api.post(
        "/api/budgets",
        json={
            "category_id": cat["id"],
            "amount": 50,
            "period": "monthly",
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
        },
    ).json()
    assert api.delete(f"/api/categories/{cat['id']}").status_code == 204
    assert api.get(f"/api/budgets/{bd['id']}").status_code == 404


def test_usage_stats(api):
    food = _category_id(api, "Food & Dining")
    for amount in (10, 15):
        api.post(
            "/api/transactions",
            json={"amount": amount, "type": "expense", "category_id": food, "description": "meal", "date": "2024-03-03"},
        )
    rows = api.get("/api/categories/stats").json()
    assert rows[0]["name"] == "Food & Dining"
    assert rows[0]["transaction_count"] == 2
    assert rows[0]["total_amount"] == 25.0
    unused = next(r for r in rows if r["name"] == "Healthcare")
    assert unused["transaction_count"] == 0
    assert unused["total_amount"] == 0.0


def test_store_rejects_duplicate_that_slips_past_name_check(db_session, demo_user, monkeypatch):
    svc = CategoryService(db_session)
    payload = CategoryCreate(name="Pets", kind="expense", color="#aabbcc", icon="🐶")
    svc.create(demo_user.id, payload)

    # a concurrent request that checked before the first one committed
    monkeypatch.setattr(CategoryService, "find_by_name", lambda self, *a, **kw: None)
    with pytest.raises(ConflictError):
        svc.create(demo_user.id, CategoryCreate(name="PETS", kind="expense", color="#000000", icon="x"))

    count = (
        db_session.query(models.Category)
        .filter(models.Category.user_id == demo_user.id, func.lower(models.Category.name) == "pets")
        .count()
    )
    assert count == 1
