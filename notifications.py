"""Due-date alert dashboard built on the classifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from due_dates import DONE, classify_due_date, coerce_date, describe_due_date


@dataclass
class Alert:
    task_id: str
    title: str
    priority: Optional[str]
    due_date: Optional[date]
    status: str
    days_until_due: Optional[int]
    text: str


@dataclass
class Dashboard:
    overdue: list[Alert] = field(default_factory=list)
    due_today: list[Alert] = field(default_factory=list)
    due_tomorrow: list[Alert] = field(default_factory=list)
    due_this_week: list[Alert] = field(default_factory=list)
    urgent: list[Alert] = field(default_factory=list)
    active_count: int = 0
    completed_count: int = 0

    @property
    def alert_count(self) -> int:
        return len(self.overdue) + len(self.due_today) + len(self.due_tomorrow)

    @property
    def has_notifications(self) -> bool:
        return bool(self.alert_count or self.due_this_week)


def build_dashboard(tasks: Iterable, today: date | None = None) -> Dashboard:
    if today is None:
        today = date.today()

    board = Dashboard()
    for task in tasks:
        if task.status == DONE:
            board.completed_count += 1
            continue
        board.active_count += 1

        result = classify_due_date(task.due_date, task.status, today=today)
        alert = Alert(
            task_id=task.id,
            title=task.title,
            priority=task.priority,
            due_date=coerce_date(task.due_date),
            status=result.status,
            days_until_due=result.days_until_due,
            text=describe_due_date(task.due_date, result),
        )

        if result.is_overdue:
            board.overdue.append(alert)
        if result.is_due_today:
            board.due_today.append(alert)
        if result.is_due_tomorrow:
            board.due_tomorrow.append(alert)
        # Today and tomorrow already have their own sections.
        if result.is_due_this_week and not (result.is_due_today or result.is_due_tomorrow):
            board.due_this_week.append(alert)
        if task.priority == "URGENT":
            board.urgent.append(alert)
    return board
