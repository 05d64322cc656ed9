"""Due-date classification for tasks.

Every task with a due date falls into exactly one bucket relative to "today":
overdue, due today, due tomorrow, due later this week, or due in the future.
Completed tasks and tasks without a (valid) due date are reported as
``no-due-date``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

NO_DUE_DATE = "no-due-date"
OVERDUE = "overdue"
DUE_TODAY = "due-today"
DUE_TOMORROW = "due-tomorrow"
DUE_THIS_WEEK = "due-this-week"
DUE_FUTURE = "due-future"

DONE = "DONE"


@dataclass(frozen=True)
class DueDateStatus:
    status: str
    is_overdue: bool = False
    is_due_today: bool = False
    is_due_tomorrow: bool = False
    is_due_this_week: bool = False
    # None when the task has no due date (never due).
    days_until_due: Optional[int] = None


def coerce_date(value: object) -> date | None:
    """Coerce common date representations into a Python `date`.

    Returns None for anything that cannot be read as a calendar date.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        # HTML date input format: YYYY-MM-DD
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            return None

    return None


def end_of_week(today: date) -> date:
    """Last day of the current week, counting weeks from Sunday."""
    weekday_from_sunday = (today.weekday() + 1) % 7
    return today + timedelta(days=7 - weekday_from_sunday)


def classify_due_date(due_date: object, status: str, today: date | None = None) -> DueDateStatus:
    due = coerce_date(due_date)
    if due is None or status == DONE:
        return DueDateStatus(status=NO_DUE_DATE)

    if today is None:
        today = date.today()
    tomorrow = today + timedelta(days=1)

    is_overdue = due < today
    is_due_today = due == today
    is_due_tomorrow = due == tomorrow
    is_due_this_week = today <= due <= end_of_week(today)

    if is_overdue:
        tag = OVERDUE
    elif is_due_today:
        tag = DUE_TODAY
    elif is_due_tomorrow:
        tag = DUE_TOMORROW
    elif is_due_this_week:
        tag = DUE_THIS_WEEK
    else:
        tag = DUE_FUTURE

    return DueDateStatus(
        status=tag,
        is_overdue=is_overdue,
        is_due_today=is_due_today,
        is_due_tomorrow=is_due_tomorrow,
        is_due_this_week=is_due_this_week,
        days_until_due=(due - today).days,
    )


def describe_due_date(due_date: object, result: DueDateStatus) -> str:
    """Human-readable badge text for a classified due date."""
    days = result.days_until_due
    if result.status == OVERDUE:
        late = abs(days)
        return f"Overdue by {late} day{'s' if late != 1 else ''}"
    if result.status == DUE_TODAY:
        return "Due today"
    if result.status == DUE_TOMORROW:
        return "Due tomorrow"
    if result.status == DUE_THIS_WEEK:
        return f"Due in {days} days"
    due = coerce_date(due_date)
    if due is None:
        return "No due date"
    return f"Due {due.isoformat()}"
