"""Shared fixtures: in-memory SQLite app client and plain task objects."""

import os

# Keep the import-time create_all in main away from any real database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime, timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app

PASSWORD = "s3cret-pass"


@pytest.fixture(name="engine")
def engine_fixture():
    """Fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session_factory")
def session_factory_fixture(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(name="client")
def client_fixture(session_factory):
    """Test client whose requests each get their own session on the test database."""
    def get_db_override():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = get_db_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, name: str = "Test User") -> dict:
    response = client.post("/register", json={"name": name, "email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text
    response = client.post("/login", data={"username": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "ada@vezir.app", "Ada")


@pytest.fixture
def other_headers(client):
    return register_and_login(client, "grace@vezir.app", "Grace")


@pytest.fixture
def make_task():
    """Build a plain task object for the pure ordering/export/dashboard code."""
    counter = {"n": 0}

    def factory(**overrides):
        counter["n"] += 1
        fields = {
            "id": str(uuid4()),
            "title": f"Task {counter['n']}",
            "description": "",
            "status": "TODO",
            "priority": "MEDIUM",
            "due_date": None,
            "categories": [],
            "created_at": datetime(2026, 10, 1, 9, 0) + timedelta(seconds=counter["n"]),
            "updated_at": datetime(2026, 10, 1, 9, 0) + timedelta(seconds=counter["n"]),
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    return factory


@pytest.fixture
def make_category():
    def factory(name: str, category_id: str | None = None):
        return SimpleNamespace(id=category_id or str(uuid4()), name=name, color="#3b82f6")

    return factory
