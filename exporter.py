"""Task export: selection policy, derived fields, CSV and JSON rendering."""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable, Optional, Sequence

from due_dates import coerce_date
from task_filters import SORT_DUE_DATE, sort_tasks

METHOD_SELECTED = "selected"
METHOD_FILTERED = "filtered"
METHOD_ALL = "all"
EXPORT_METHODS = (METHOD_SELECTED, METHOD_FILTERED, METHOD_ALL)

FORMAT_CSV = "csv"
FORMAT_JSON = "json"

ANY = "ALL"
NO_DUE_DATE = "No due date"
UNCATEGORIZED = "Uncategorized"
EMPTY_CSV_BODY = "No tasks to export"
EMPTY_CSV_FILENAME = "tasks-empty.csv"

CSV_HEADERS = [
    "ID",
    "Title",
    "Description",
    "Status",
    "Priority",
    "Due Date",
    "Categories",
    "Days Until Due",
    "Created At",
    "Updated At",
]

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ExportFilters:
    status: Optional[str] = None
    priority: Optional[str] = None
    category_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def as_info(self) -> dict:
        return {
            "status": self.status,
            "priority": self.priority,
            "categoryId": self.category_id,
            "dateRange": {
                "startDate": self.start_date.isoformat() if self.start_date else None,
                "endDate": self.end_date.isoformat() if self.end_date else None,
            },
        }


def _constrains(value: Optional[str]) -> bool:
    return bool(value) and value != ANY


def _passes_filters(task, filters: ExportFilters) -> bool:
    if _constrains(filters.status) and task.status != filters.status:
        return False
    if _constrains(filters.priority) and (task.priority or "MEDIUM") != filters.priority:
        return False
    if _constrains(filters.category_id) and not any(
        category.id == filters.category_id for category in task.categories
    ):
        return False
    if filters.start_date or filters.end_date:
        due = coerce_date(task.due_date)
        if due is None:
            return False
        if filters.start_date and due < filters.start_date:
            return False
        if filters.end_date and due > filters.end_date:
            return False
    return True


def select_for_export(
    tasks: Iterable,
    method: str,
    task_ids: Sequence[str] = (),
    filters: ExportFilters = ExportFilters(),
) -> list:
    """Pick the tasks an export covers, ordered by due date (undated last)."""
    if method == METHOD_SELECTED:
        wanted = set(task_ids)
        chosen = [task for task in tasks if task.id in wanted]
    elif method == METHOD_FILTERED:
        chosen = [task for task in tasks if _passes_filters(task, filters)]
    else:
        chosen = list(tasks)
    return sort_tasks(chosen, sort_by=SORT_DUE_DATE)


def days_until_due(due_date: object, now: datetime) -> Optional[int]:
    due = coerce_date(due_date)
    if due is None:
        return None
    delta = datetime.combine(due, time.min) - now
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def _iso_day(value: object) -> Optional[str]:
    day = coerce_date(value)
    return day.isoformat() if day else None


def export_task(task, now: datetime) -> dict:
    due = coerce_date(task.due_date)
    names = [category.name for category in task.categories]
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description or "",
        "status": task.status,
        "priority": task.priority or "MEDIUM",
        "dueDate": due.isoformat() if due else NO_DUE_DATE,
        "createdAt": _iso_day(task.created_at),
        "updatedAt": _iso_day(task.updated_at),
        "categories": ", ".join(names) or UNCATEGORIZED,
        "daysUntilDue": days_until_due(due, now),
    }


def export_tasks(tasks: Iterable, now: datetime) -> list[dict]:
    return [export_task(task, now) for task in tasks]


def csv_filename(method: str, today: date) -> str:
    suffix = method if method in EXPORT_METHODS else METHOD_ALL
    return f"tasks-{suffix}-{today.isoformat()}.csv"


def render_csv(exported: Sequence[dict], method: str, today: date) -> tuple[str, str]:
    """Render exported tasks as CSV text. Returns ``(body, filename)``."""
    if not exported:
        return EMPTY_CSV_BODY, EMPTY_CSV_FILENAME

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in exported:
        days = row["daysUntilDue"]
        writer.writerow([
            row["id"],
            row["title"],
            row["description"],
            row["status"],
            row["priority"],
            row["dueDate"],
            row["categories"],
            NO_DUE_DATE if days is None else days,
            row["createdAt"],
            row["updatedAt"],
        ])
    return buffer.getvalue().rstrip("\n"), csv_filename(method, today)


def render_json(
    exported: Sequence[dict],
    method: str,
    now: datetime,
    task_ids: Sequence[str] = (),
    filters: Optional[ExportFilters] = None,
) -> dict:
    # Naive values are local time; the stamp is always written in UTC.
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    info = {
        "exportedAt": stamp.replace("+00:00", "Z"),
        "totalTasks": len(exported),
        "exportMethod": method,
    }
    if method == METHOD_FILTERED:
        info["filters"] = (filters or ExportFilters()).as_info()
    if method == METHOD_SELECTED:
        info["selectedTaskIds"] = list(task_ids)
    return {"tasks": list(exported), "exportInfo": info}
