"""Tests for registration, login and the bearer-token guard."""

from conftest import PASSWORD


def test_register_and_login(client):
    response = client.post(
        "/register",
        json={"name": "Ada", "email": "ada@vezir.app", "password": PASSWORD},
    )
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "ada@vezir.app"
    assert "createdAt" in user
    assert "hashedPassword" not in user

    response = client.post("/login", data={"username": "ada@vezir.app", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]


def test_duplicate_email_is_rejected(client, auth_headers):
    response = client.post(
        "/register",
        json={"name": "Ada again", "email": "ada@vezir.app", "password": PASSWORD},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_register_validation_errors_are_listed(client):
    response = client.post("/register", json={"name": "  ", "email": "nope", "password": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "email", "password"} <= fields


def test_wrong_password(client, auth_headers):
    response = client.post("/login", data={"username": "ada@vezir.app", "password": "wrong-one"})
    assert response.status_code == 401


def test_profile_requires_token(client, auth_headers):
    assert client.get("/profile").status_code == 401
    assert client.get("/profile", headers={"Authorization": "Bearer garbage"}).status_code == 401

    response = client.get("/profile", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Ada"


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy", "service": "vezir-api"}


def test_login_ignores_email_case(client):
    response = client.post(
        "/register",
        json={"name": "Ada", "email": "Ada@Example.COM", "password": PASSWORD},
    )
    assert response.status_code == 201
    assert response.json()["user"]["email"] == "ada@example.com"

    for username in ("Ada@Example.COM", "ada@example.com", " ADA@EXAMPLE.COM "):
        response = client.post("/login", data={"username": username, "password": PASSWORD})
        assert response.status_code == 200, username

    response = client.post(
        "/register",
        json={"name": "Ada again", "email": "ADA@example.com", "password": PASSWORD},
    )
    assert response.status_code == 400
