from __future__ import annotations

import pytest

from finance_api.core.config import get_settings
from finance_api.core.errors import AuthError
from finance_api.core.security import TokenService, hash_password, verify_password


def test_password_hashing():
    hashed = hash_password("correct horse", rounds=4)
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("correct horse", "not-a-bcrypt-hash")


def test_token_round_trip_and_tamper():
    tokens = TokenService(get_settings())
    token = tokens.issue(42)
    assert tokens.verify(token) == 42
    with pytest.raises(AuthError, match="Invalid token."):
        tokens.verify(token[:-2] + "xx")


def test_token_signed_with_other_secret_rejected():
    other = TokenService(get_settings().model_copy(update={"SECRET_KEY": "someone-else"}))
    with pytest.raises(AuthError):
        TokenService(get_settings()).verify(other.issue(1))


def test_expired_token():
    expired = TokenService(get_settings().model_copy(update={"TOKEN_MAX_AGE_SECONDS": -1}))
    with pytest.raises(AuthError, match="Token expired."):
        expired.verify(expired.issue(1))


def test_health_and_unknown_route(client):
    assert client.get("/health").json() == {"status": "ok"}
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}
