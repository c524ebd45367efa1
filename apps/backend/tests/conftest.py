from __future__ import annotations

import os
import tempfile
from typing import Any, Generator

# must be set before finance_api builds its engine and caches settings
_fd, _DB_PATH = tempfile.mkstemp(prefix="finapp_test_", suffix=".sqlite3")
os.close(_fd)
os.environ["FINAPP_DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["FINAPP_BCRYPT_ROUNDS"] = "4"
os.environ["FINAPP_CREATE_TABLES"] = "false"
os.environ["FINAPP_SEED_DEFAULTS"] = "false"
os.environ["FINAPP_SECRET_KEY"] = "test-secret"

import pytest
from sqlalchemy.orm import sessionmaker

from finance_api import models
from finance_api.core.config import get_settings
from finance_api.core.database import Base, build_engine, get_db
from finance_api.core.deps import get_current_user
from finance_api.core.security import TokenService, hash_password
from finance_api.main import app
from finance_api.services.category_service import CategoryService


DEMO_PASSWORD = "password123"


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    yield os.environ["FINAPP_DATABASE_URL"]
    for suffix in ("", "-wal", "-shm"):
        try:
            os.remove(_DB_PATH + suffix)
        except OSError:
            pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = build_engine(get_settings())
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def _make_user(session, email: str, password: str = DEMO_PASSWORD) -> models.User:
    user = models.User(
        email=email,
        password_hash=hash_password(password, rounds=4),
        first_name="Demo",
        last_name="User",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(scope="function")
def db_session(engine, session_factory) -> Generator[Any, Any, Any]:
    session = session_factory()
    # every test starts from: one demo user + system default categories
    _make_user(session, "demo@example.com")
    CategoryService(session).seed_defaults()

    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def demo_user(db_session) -> models.User:
    return db_session.query(models.User).filter_by(email="demo@example.com").one()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def auth_headers(demo_user) -> dict[str, str]:
    token = TokenService(get_settings()).issue(demo_user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def api(client, auth_headers):
    """Client authenticated as the demo user via a real bearer token."""
    client.headers.update(auth_headers)
    return client


@pytest.fixture()
def user_factory(db_session):
    def _factory(email: str, password: str = DEMO_PASSWORD) -> models.User:
        return _make_user(db_session, email, password)

    return _factory


@pytest.fixture()
def act_as(client):
    """Switch the acting user without going through token auth."""

    def _act_as(user: models.User):
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _act_as
