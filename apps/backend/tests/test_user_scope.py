from __future__ import annotations


def test_entities_are_isolated_between_users(client, demo_user, user_factory, act_as):
    other = user_factory("other@example.com")

    act_as(demo_user)
    cat = client.post(
        "/api/categories", json={"name": "Private", "kind": "expense", "color": "#abcdef", "icon": "🔒"}
    ).json()
    txn = client.post(
        "/api/transactions",
        json={"amount": 10, "type": "expense", "category_id": cat["id"], "description": "mine", "date": "2024-03-01"},
    ).json()
    goal = client.post("/api/goals", json={"title": "mine", "target_amount": 10, "target_date": "2025-01-01"}).json()
    budget = client.post(
        "/api/budgets",
        json={
            "category_id": cat["id"],
            "amount": 10,
            "period": "monthly",
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
        },
    ).json()

    act_as(other)
    assert client.get(f"/api/transactions/{txn['id']}").status_code == 404
    assert client.put(f"/api/transactions/{txn['id']}", json={"amount": 1}).status_code == 404
    assert client.delete(f"/api/transactions/{txn['id']}").status_code == 404
    assert client.get(f"/api/categories/{cat['id']}").status_code == 404
    assert client.get(f"/api/goals/{goal['id']}").status_code == 404
    assert client.post(f"/api/goals/{goal['id']}/progress", json={"amount": 1}).status_code == 404
    assert client.get(f"/api/budgets/{budget['id']}").status_code == 404
    assert client.get("/api/transactions").json()["total"] == 0
    assert "Private" not in {c["name"] for c in client.get("/api/categories").json()}
    assert client.get("/api/transactions/stats").json()["total_expenses"] == 0.0

    # another user's category cannot be used either
    r = client.post(
        "/api/transactions",
        json={"amount": 1, "type": "expense", "category_id": cat["id"], "description": "x", "date": "2024-03-01"},
    )
    assert r.status_code == 404

    act_as(demo_user)
    assert client.get(f"/api/goals/{goal['id']}").json()["current_amount"] == 0.0
    assert client.get("/api/transactions").json()["total"] == 1
