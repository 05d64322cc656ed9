"""Tests for the maintenance CLI (data dump and restore)."""

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typer.testing import CliRunner

import database
import manage
from database import Base
from models import Task, TaskCategory, User

runner = CliRunner()


def _fresh_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine, sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    # The CLI callback reconfigures the root logger; leave pytest's handlers alone.
    monkeypatch.setattr(manage, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def populated(client, auth_headers, session_factory, monkeypatch):
    category = client.post("/api/categories", json={"name": "Work"}, headers=auth_headers).json()["category"]
    client.post(
        "/api/tasks",
        json={"title": "Linked", "dueDate": "2026-11-01", "categoryIds": [category["id"]]},
        headers=auth_headers,
    )
    client.post("/api/tasks", json={"title": "Loose"}, headers=auth_headers)
    monkeypatch.setattr(database, "SessionLocal", session_factory)
    return category


def test_export_then_import_round_trip(populated, tmp_path, monkeypatch):
    dump = tmp_path / "dump.json"
    result = runner.invoke(manage.app, ["export-data", "--output", str(dump)])
    assert result.exit_code == 0, result.output
    assert "Exported 1 users" in result.output

    data = json.loads(dump.read_text())
    user = data["users"][0]
    assert user["email"] == "ada@vezir.app"
    assert [c["name"] for c in user["categories"]] == ["Work"]
    linked = next(t for t in user["tasks"] if t["title"] == "Linked")
    assert linked["categoryIds"] == [populated["id"]]
    assert linked["dueDate"] == "2026-11-01"
    assert "exportDate" in data

    engine, target = _fresh_factory()
    monkeypatch.setattr(database, "SessionLocal", target)
    result = runner.invoke(manage.app, ["import-data", "--input", str(dump)])
    assert result.exit_code == 0, result.output
    assert "Imported 1 users" in result.output

    db = target()
    try:
        assert db.query(User).one().email == "ada@vezir.app"
        assert {t.title for t in db.query(Task).all()} == {"Linked", "Loose"}
        link = db.query(TaskCategory).one()
        assert link.category_id == populated["id"]
    finally:
        db.close()
        engine.dispose()


def test_import_missing_file(tmp_path):
    result = runner.invoke(manage.app, ["import-data", "--input", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_create_tables(monkeypatch):
    engine, _ = _fresh_factory()
    monkeypatch.setattr(database, "engine", engine)
    result = runner.invoke(manage.app, ["create-tables"])
    assert result.exit_code == 0
    assert "Tables created" in result.output
    engine.dispose()


def test_import_skips_links_to_another_users_category(tmp_path, monkeypatch):
    dump = tmp_path / "dump.json"
    dump.write_text(json.dumps({
        "users": [
            {
                "id": 1,
                "name": "Ada",
                "email": "ada@vezir.app",
                "hashedPassword": "x",
                "categories": [{"id": "c1", "name": "Work", "color": "#3b82f6"}],
                "tasks": [{"id": "t1", "title": "Mine", "categoryIds": ["c1"]}],
            },
            {
                "id": 2,
                "name": "Grace",
                "email": "grace@vezir.app",
                "hashedPassword": "y",
                "categories": [],
                "tasks": [{"id": "t2", "title": "Borrowed", "categoryIds": ["c1"]}],
            },
        ],
    }))
    engine, target = _fresh_factory()
    monkeypatch.setattr(database, "SessionLocal", target)

    result = runner.invoke(manage.app, ["import-data", "--input", str(dump)])
    assert result.exit_code == 0, result.output

    db = target()
    try:
        links = [(link.task_id, link.category_id) for link in db.query(TaskCategory).all()]
        assert links == [("t1", "c1")]
        assert {t.title for t in db.query(Task).all()} == {"Mine", "Borrowed"}
    finally:
        db.close()
        engine.dispose()


def test_serve_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(manage.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    result = runner.invoke(manage.app, ["serve", "--port", "9001"])
    assert result.exit_code == 0, result.output
    assert calls == [(("main:app",), {"host": "127.0.0.1", "port": 9001, "reload": False})]
