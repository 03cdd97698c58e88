# File: tests/test_auth.py | Version: 2.0 | Path: /tests/test_auth.py
from __future__ import annotations

from typing import Dict

from fastapi.testclient import TestClient


def _auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_register_and_login(client: TestClient):
    reg = client.post("/auth/register", json={"email": "test@example.com", "password": "secret123"})
    assert reg.status_code in (200, 201)

    login = client.post(
        "/auth/login",
        data={"username": "test@example.com", "password": "secret123"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert login.status_code == 200
    data = login.json()
    assert "access_token" in data
    assert data.get("token_type") in ("bearer", "Bearer")


def test_register_is_idempotent_and_validates(client: TestClient):
    first = client.post("/auth/register", json={"email": "Same@Example.com", "password": "x"})
    second = client.post("/auth/register", json={"email": "same@example.com", "password": "y"})
    assert first.status_code == 200 and second.status_code == 200
    assert first.json()["id"] == second.json()["id"]

    bad = client.post("/auth/register", json={"email": "not-an-email", "password": "x"})
    assert bad.status_code == 422


def test_wrong_password_is_rejected(client: TestClient):
    client.post("/auth/register", json={"email": "pw@example.com", "password": "right"})
    r = client.post("/auth/login", json={"email": "pw@example.com", "password": "wrong"})
    assert r.status_code == 401


def test_refresh_flow_and_me(client: TestClient):
    email = "refresh@example.com"
    client.post("/auth/register", json={"email": email, "password": "Passw0rd!", "full_name": "Ref Tester"})

    body = client.post("/auth/login", json={"email": email, "password": "Passw0rd!"}).json()
    assert body["token_type"] == "bearer"

    r = client.get("/auth/me", headers=_auth_headers(body["access_token"]))
    assert r.status_code == 200, r.text
    assert r.json()["email"] == email

    r = client.post("/auth/refresh", json={"refresh_token": body["refresh_token"]})
    assert r.status_code == 200, r.text
    r = client.get("/bases", headers=_auth_headers(r.json()["access_token"]))
    assert r.status_code == 200

    # an access token is not accepted as a refresh token
    r = client.post("/auth/refresh", json={"refresh_token": body["access_token"]})
    assert r.status_code == 401


def test_refresh_token_is_not_an_access_token(client: TestClient):
    client.post("/auth/register", json={"email": "kinds@example.com", "password": "Passw0rd!"})
    body = client.post("/auth/login", json={"email": "kinds@example.com", "password": "Passw0rd!"}).json()

    r = client.get("/auth/me", headers=_auth_headers(body["refresh_token"]))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token type"


def test_oauth_token_form_returns_both_tokens(client: TestClient):
    client.post("/auth/register", json={"email": "formflow@example.com", "password": "Passw0rd!"})
    r = client.post("/auth/token", data={"username": "formflow@example.com", "password": "Passw0rd!"})
    assert r.status_code == 200, r.text
    assert {"access_token", "refresh_token"} <= set(r.json())


def test_protected_routes_require_token(client: TestClient):
    assert client.get("/bases").status_code == 401
    assert client.get("/bases", headers=_auth_headers("garbage")).status_code == 401
