from __future__ import annotations


def _category_id(client, name: str) -> int:
    rows = client.get("/api/categories").json()
    return next(c["id"] for c in rows if c["name"] == name)


def _txn(client, **overrides):
    body = {
        "amount": 25.5,
        "type": "expense",
        "category_id": _category_id(client, "Food & Dining"),
        "description": "Lunch",
        "date": "2024-03-10",
    }
    body.update(overrides)
    return client.post("/api/transactions", json=body)


def test_create_and_get_round_trip(api, demo_user):
    r = _txn(api, is_recurring=True, recurring_period="monthly", recurring_end_date="2024-12-31")
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["amount"] == 25.5
    assert created["kind"] == "expense"
    assert created["category_name"] == "Food & Dining"
    assert created["date"] == "2024-03-10"
    assert created["user_id"] == demo_user.id
    assert created["recurring_period"] == "monthly"

    fetched = api.get(f"/api/transactions/{created['id']}").json()
    assert fetched == created


def test_amount_must_be_positive(api):
    for amount in (0, -5):
        r = _txn(api, amount=amount)
        assert r.status_code == 400
        assert "error" in r.json()


def test_recurring_requires_period(api):
    r = _txn(api, is_recurring=True)
    assert r.status_code == 400
    r = _txn(api, is_recurring=False, recurring_period="weekly")
    assert r.status_code == 400


def test_unknown_category_is_not_found(api):
    r = _txn(api, category_id=999999)
    assert r.status_code == 404


def test_paging_filters_and_order(api):
    salary = _category_id(api, "Salary")
    _txn(api, date="2024-01-05", description="a")
    _txn(api, date="2024-02-05", description="b")
    _txn(api, date="2024-03-05", description="c")
    _txn(api, date="2024-03-06", type="income", category_id=salary, description="pay")

    r = api.get("/api/transactions", params={"page": 1, "page_size": 2})
    assert r.status_code == 200
    page = r.json()
    assert page["total"] == 4
    assert page["total_pages"] == 2
    assert [t["description"] for t in page["items"]] == ["pay", "c"]

    page2 = api.get("/api/transactions", params={"page": 2, "page_size": 2}).json()
    assert [t["description"] for t in page2["items"]] == ["b", "a"]

    only_exp = api.get(
        "/api/transactions",
        params={"type": "expense", "start_date": "2024-02-01", "end_date": "2024-03-31"},
    ).json()
    assert [t["description"] for t in only_exp["items"]] == ["c", "b"]

    by_cat = api.get("/api/transactions", params={"category_id": salary}).json()
    assert by_cat["total"] == 1


def test_paging_bounds_rejected(api):
    assert api.get("/api/transactions", params={"page": 0}).status_code == 400
    assert api.get("/api/transactions", params={"page_size": 101}).status_code == 400
    r = api.get("/api/transactions", params={"start_date": "2024-05-01", "end_date": "2024-04-01"})
    assert r.status_code == 400


def test_partial_update_and_recurring_clear(api):
    created = _txn(api, is_recurring=True, recurring_period="weekly").json()

    r = api.put(f"/api/transactions/{created['id']}", json={"description": "Dinner"})
    assert r.status_code == 200
    body = r.json()
    assert body["description"] == "Dinner"
    assert body["amount"] == 25.5
    assert body["recurring_period"] == "weekly"

    r = api.put(f"/api/transactions/{created['id']}", json={"is_recurring": False})
    assert r.status_code == 200
    assert r.json()["recurring_period"] is None

    r = api.put(f"/api/transactions/{created['id']}", json={"is_recurring": True})
    assert r.status_code == 400

    r = api.put(f"/api/transactions/{created['id']}", json={"amount": None})
    assert r.status_code == 400


def test_delete(api):
    created = _txn(api).json()
    assert api.delete(f"/api/transactions/{created['id']}").status_code == 204
    assert api.get(f"/api/transactions/{created['id']}").status_code == 404
    assert api.delete(f"/api/transactions/{created['id']}").status_code == 404
