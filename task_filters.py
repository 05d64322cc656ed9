"""In-memory filtering and ordering of task lists."""

from __future__ import annotations

from typing import Iterable, Sequence

from due_dates import coerce_date

ACTIVE = "ACTIVE"
ACTIVE_STATUSES = frozenset({"TODO", "IN_PROGRESS"})

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_DUE_DATE = "dueDate"
SORT_TITLE = "title"
SORT_KEYS = (SORT_NEWEST, SORT_OLDEST, SORT_DUE_DATE, SORT_TITLE)

PRIORITY_RANK = {"URGENT": 4, "HIGH": 3, "MEDIUM": 2, "LOW": 1}


def priority_rank(priority: str | None) -> int:
    return PRIORITY_RANK.get(priority or "", 0)


def _matches_search(task, needle: str) -> bool:
    if not needle:
        return True
    if needle in (task.title or "").lower():
        return True
    return bool(task.description) and needle in task.description.lower()


def _matches_status(task, status: str) -> bool:
    if not status:
        return True
    if status == ACTIVE:
        return task.status in ACTIVE_STATUSES
    return task.status == status


def _matches_category(task, category_id: str) -> bool:
    if not category_id or category_id.lower() == "all":
        return True
    return any(category.id == category_id for category in task.categories)


def filter_tasks(tasks: Iterable, search: str = "", status: str = "", category_id: str = "") -> list:
    needle = (search or "").strip().lower()
    return [
        task
        for task in tasks
        if _matches_search(task, needle)
        and _matches_status(task, status or "")
        and _matches_category(task, category_id or "")
    ]


def sort_tasks(tasks: Sequence, sort_by: str = SORT_NEWEST, priority_first: bool = False) -> list:
    """Return a new list ordered by ``sort_by``.

    Python's sort is stable, so the priority pass runs last and keeps the
    ``sort_by`` order among tasks of equal priority.
    """
    if sort_by == SORT_OLDEST:
        ordered = sorted(tasks, key=lambda t: t.created_at)
    elif sort_by == SORT_DUE_DATE:
        ordered = sorted(tasks, key=_due_date_key)
    elif sort_by == SORT_TITLE:
        ordered = sorted(tasks, key=lambda t: ((t.title or "").casefold(), t.title or ""))
    else:
        ordered = sorted(tasks, key=lambda t: t.created_at, reverse=True)

    if priority_first:
        ordered.sort(key=lambda t: priority_rank(t.priority), reverse=True)
    return ordered


def _due_date_key(task):
    due = coerce_date(task.due_date)
    # Undated tasks go after every dated one.
    return (due is None, due.toordinal() if due else 0)


def filter_and_sort(
    tasks: Iterable,
    *,
    search: str = "",
    status: str = "",
    category_id: str = "",
    sort_by: str = SORT_NEWEST,
    priority_first: bool = False,
) -> list:
    filtered = filter_tasks(tasks, search=search, status=status, category_id=category_id)
    return sort_tasks(filtered, sort_by=sort_by, priority_first=priority_first)
