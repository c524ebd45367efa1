from __future__ import annotations


def test_created_lazily_with_defaults(api):
    r = api.get("/api/preferences")
    assert r.status_code == 200
    body = r.json()
    assert body["currency"] == "USD"
    assert body["theme"] == "light"
    # second read returns the same row
    assert api.get("/api/preferences").json()["id"] == body["id"]


def test_partial_upsert(api):
    r = api.put("/api/preferences", json={"theme": "dark"})
    assert r.status_code == 200
    assert r.json()["theme"] == "dark"
    assert r.json()["currency"] == "USD"

    r = api.put("/api/preferences", json={"currency": "EUR"})
    assert r.status_code == 200
    assert (r.json()["currency"], r.json()["theme"]) == ("EUR", "dark")


def test_invalid_values_rejected(api):
    assert api.put("/api/preferences", json={"currency": "JPY"}).status_code == 400
    assert api.put("/api/preferences", json={"theme": "neon"}).status_code == 400
