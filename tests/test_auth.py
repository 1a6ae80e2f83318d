"""
Registration, login and bearer-token access
"""
from app.core.security import create_access_token


def register(client, **overrides):
    payload = {"name": "Priya", "email": "priya@mehndi.app", "password": "henna-lover-1"}
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


def test_register_hides_password(client):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "priya@mehndi.app"
    assert body["name"] == "Priya"
    assert "password" not in body
    assert "hashed_password" not in body


def test_duplicate_email_is_rejected(client):
    register(client)
    response = register(client, name="Someone else")
    assert response.status_code == 409


def test_register_requires_fields(client):
    response = client.post("/api/v1/auth/register", json={"email": "x@mehndi.app"})
    assert response.status_code == 422


def test_login_and_me(client):
    register(client)

    login = client.post("/api/v1/auth/login", json={"email": "priya@mehndi.app", "password": "henna-lover-1"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "priya@mehndi.app"


def test_login_wrong_password(client):
    register(client)
    response = client.post("/api/v1/auth/login", json={"email": "priya@mehndi.app", "password": "wrong-password"})
    assert response.status_code == 401


def test_login_unknown_email(client):
    response = client.post("/api/v1/auth/login", json={"email": "ghost@mehndi.app", "password": "whatever1"})
    assert response.status_code == 401


def test_missing_token(client):
    assert client.get("/api/v1/photos/").status_code == 401


def test_invalid_token(client):
    response = client.get("/api/v1/photos/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_for_deleted_user(client):
    token = create_access_token(data={"sub": "no-such-user"})
    response = client.get("/api/v1/albums/", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
