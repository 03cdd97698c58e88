# File: /tests/conftest.py
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gridbase.client import GridApiClient
from gridbase.db.base_class import Base
from gridbase.db.session import get_db
from gridbase.main import app


@pytest.fixture()
def engine():
    # one private in-memory database per test
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client, email: str, password: str = "pass123") -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    r = client.post(
        "/auth/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 200, f"Login failed for {email}: {r.text}"
    return r.json()["access_token"]


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers(client) -> Dict[str, str]:
    return auth_headers(register_and_login(client, "owner@example.com"))


@pytest.fixture()
def api(client, headers) -> GridApiClient:
    return GridApiClient(client, token=headers["Authorization"].split(" ", 1)[1])


@pytest.fixture()
def empty_table(client, headers) -> Dict[str, str]:
    """A base whose first table has been emptied of rows and columns."""
    base = client.post("/bases", json={"name": "Scratch"}, headers=headers).json()
    table_id = base["last_opened_table_id"]
    client.delete(f"/tables/{table_id}/rows", headers=headers)
    for col in client.get(f"/tables/{table_id}/columns", headers=headers).json():
        client.delete(f"/columns/{col['id']}", headers=headers)
    return {"base_id": base["id"], "table_id": table_id}
