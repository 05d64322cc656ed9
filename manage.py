"""Vezir maintenance CLI: API server, schema creation and full data dumps/restores."""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path

import typer
import uvicorn
from sqlalchemy.orm import selectinload

import config
import database
from database import transaction
from logging_setup import setup_logging
from models import Category, Task, TaskCategory, User

app = typer.Typer(
    name="vezir",
    help="Vezir maintenance commands",
    no_args_is_help=True,
)
logger = logging.getLogger("vezir.manage")


def _iso(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _parse_datetime(value):
    return datetime.fromisoformat(value) if value else None


def _timestamps(item: dict) -> dict:
    """created_at/updated_at from a dump entry; missing ones fall back to column defaults."""
    stamps = {}
    for key, column in (("createdAt", "created_at"), ("updatedAt", "updated_at")):
        if item.get(key):
            stamps[column] = _parse_datetime(item[key])
    return stamps


def _parse_date(value):
    return date.fromisoformat(value[:10]) if value else None


def dump_users(db) -> dict:
    users = (
        db.query(User)
        .options(
            selectinload(User.categories),
            selectinload(User.tasks).selectinload(Task.category_links),
        )
        .order_by(User.id)
        .all()
    )
    return {
        "users": [
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "hashedPassword": user.hashed_password,
                "createdAt": _iso(user.created_at),
                "updatedAt": _iso(user.updated_at),
                "categories": [
                    {
                        "id": category.id,
                        "name": category.name,
                        "color": category.color,
                        "createdAt": _iso(category.created_at),
                        "updatedAt": _iso(category.updated_at),
                    }
                    for category in user.categories
                ],
                "tasks": [
                    {
                        "id": task.id,
                        "title": task.title,
                        "description": task.description,
                        "status": task.status,
                        "priority": task.priority,
                        "dueDate": _iso(task.due_date),
                        "createdAt": _iso(task.created_at),
                        "updatedAt": _iso(task.updated_at),
                        "categoryIds": [link.category_id for link in task.category_links],
                    }
                    for task in user.tasks
                ],
            }
            for user in users
        ],
        "exportDate": datetime.now(timezone.utc).isoformat(),
    }


def load_users(db, data: dict) -> int:
    """Recreate users, categories, tasks and links from a dump, keeping ids."""
    users = data.get("users", [])
    with transaction(db):
        for entry in users:
            logger.info("Importing user %s", entry["email"])
            user = User(
                id=entry["id"],
                name=entry.get("name"),
                email=entry["email"],
                hashed_password=entry["hashedPassword"],
                **_timestamps(entry),
            )
            db.add(user)
            db.flush()

            owned = set()
            for item in entry.get("categories", []):
                owned.add(item["id"])
                db.add(Category(
                    id=item["id"],
                    name=item["name"],
                    color=item.get("color") or config.DEFAULT_CATEGORY_COLOR,
                    user_id=user.id,
                    **_timestamps(item),
                ))
            db.flush()

            for item in entry.get("tasks", []):
                db.add(Task(
                    id=item["id"],
                    title=item["title"],
                    description=item.get("description") or "",
                    status=item.get("status") or "TODO",
                    priority=item.get("priority") or "MEDIUM",
                    due_date=_parse_date(item.get("dueDate")),
                    user_id=user.id,
                    **_timestamps(item),
                ))
                db.flush()
                for category_id in item.get("categoryIds", []):
                    if category_id not in owned:
                        logger.warning(
                            "Skipping link from task %s to category %s: not owned by %s",
                            item["id"], category_id, entry["email"],
                        )
                        continue
                    db.add(TaskCategory(task_id=item["id"], category_id=category_id))
    return len(users)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    setup_logging("DEBUG" if verbose else config.LOG_LEVEL, config.LOG_FILE or None)


@app.command("create-tables")
def create_tables():
    """Create every table that does not exist yet."""
    database.Base.metadata.create_all(bind=database.engine)
    typer.echo("Tables created")


@app.command("export-data")
def export_data(output: Path = typer.Option(Path("sqlite-export.json"), "--output", "-o")):
    """Dump all users with their categories and tasks to a JSON file."""
    db = database.SessionLocal()
    try:
        data = dump_users(db)
    finally:
        db.close()
    output.write_text(json.dumps(data, indent=2), encoding="utf-8")
    typer.echo(f"Exported {len(data['users'])} users to {output}")


@app.command("import-data")
def import_data(source: Path = typer.Option(Path("sqlite-export.json"), "--input", "-i")):
    """Load a dump produced by export-data into the configured database."""
    if not source.exists():
        typer.echo(f"File not found: {source}", err=True)
        raise typer.Exit(code=1)
    data = json.loads(source.read_text(encoding="utf-8"))
    db = database.SessionLocal()
    try:
        count = load_users(db, data)
    finally:
        db.close()
    typer.echo(f"Imported {count} users from {source}")


@app.command("serve")
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the API server."""
    typer.echo(f"Starting Vezir API at http://{host}:{port}")
    uvicorn.run("main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
