"""Tests for in-memory task filtering and ordering."""

from datetime import date, datetime

from task_filters import filter_and_sort, filter_tasks, priority_rank, sort_tasks


def titles(tasks):
    return [t.title for t in tasks]


def test_search_matches_title_or_description_case_insensitively(make_task):
    tasks = [
        make_task(title="Buy milk"),
        make_task(title="Call mom", description="About the MILK delivery"),
        make_task(title="Write report", description=None),
    ]
    assert titles(filter_tasks(tasks, search="milk")) == ["Buy milk", "Call mom"]
    assert titles(filter_tasks(tasks, search="  ")) == titles(tasks)


def test_active_status_covers_todo_and_in_progress(make_task):
    tasks = [
        make_task(title="a", status="TODO"),
        make_task(title="b", status="IN_PROGRESS"),
        make_task(title="c", status="DONE"),
    ]
    assert titles(filter_tasks(tasks, status="ACTIVE")) == ["a", "b"]
    assert titles(filter_tasks(tasks, status="DONE")) == ["c"]
    assert titles(filter_tasks(tasks, status="")) == ["a", "b", "c"]


def test_category_filter(make_task, make_category):
    work = make_category("Work")
    home = make_category("Home")
    tasks = [
        make_task(title="a", categories=[work]),
        make_task(title="b", categories=[home, work]),
        make_task(title="c", categories=[home]),
        make_task(title="d"),
    ]
    assert titles(filter_tasks(tasks, category_id=work.id)) == ["a", "b"]
    assert titles(filter_tasks(tasks, category_id="all")) == ["a", "b", "c", "d"]


def test_filters_combine(make_task, make_category):
    work = make_category("Work")
    tasks = [
        make_task(title="Plan sprint", status="TODO", categories=[work]),
        make_task(title="Plan holiday", status="TODO"),
        make_task(title="Plan retro", status="DONE", categories=[work]),
    ]
    result = filter_tasks(tasks, search="plan", status="ACTIVE", category_id=work.id)
    assert titles(result) == ["Plan sprint"]


def test_newest_and_oldest(make_task):
    tasks = [
        make_task(title="mid", created_at=datetime(2026, 10, 2)),
        make_task(title="old", created_at=datetime(2026, 10, 1)),
        make_task(title="new", created_at=datetime(2026, 10, 3)),
    ]
    assert titles(sort_tasks(tasks, "newest")) == ["new", "mid", "old"]
    assert titles(sort_tasks(tasks, "oldest")) == ["old", "mid", "new"]
    # Unknown keys behave like "newest".
    assert titles(sort_tasks(tasks, "bogus")) == ["new", "mid", "old"]


def test_due_date_sort_puts_undated_tasks_last(make_task):
    tasks = [
        make_task(title="none-1"),
        make_task(title="late", due_date=date(2026, 12, 1)),
        make_task(title="none-2"),
        make_task(title="soon", due_date=date(2026, 10, 20)),
    ]
    ordered = sort_tasks(tasks, "dueDate")
    assert titles(ordered) == ["soon", "late", "none-1", "none-2"]


def test_title_sort_ignores_case(make_task):
    tasks = [make_task(title="banana"), make_task(title="Apple"), make_task(title="cherry")]
    assert titles(sort_tasks(tasks, "title")) == ["Apple", "banana", "cherry"]


def test_priority_first_puts_urgent_on_top(make_task):
    tasks = [
        make_task(title="low", priority="LOW"),
        make_task(title="urgent", priority="URGENT"),
        make_task(title="medium", priority="MEDIUM"),
    ]
    ordered = sort_tasks(tasks, "title", priority_first=True)
    assert titles(ordered) == ["urgent", "medium", "low"]


def test_priority_ties_fall_back_to_selected_key(make_task):
    tasks = [
        make_task(title="b-high", priority="HIGH"),
        make_task(title="unset", priority=None),
        make_task(title="a-high", priority="HIGH"),
    ]
    ordered = sort_tasks(tasks, "title", priority_first=True)
    assert titles(ordered) == ["a-high", "b-high", "unset"]


def test_priority_rank():
    assert [priority_rank(p) for p in ("URGENT", "HIGH", "MEDIUM", "LOW", None, "odd")] == [4, 3, 2, 1, 0, 0]


def test_input_is_not_mutated_and_result_is_repeatable(make_task):
    tasks = [make_task(title=t, created_at=datetime(2026, 10, 1)) for t in ("x", "y", "z")]
    snapshot = list(tasks)
    first = filter_and_sort(tasks, sort_by="newest", priority_first=True)
    second = filter_and_sort(tasks, sort_by="newest", priority_first=True)
    assert tasks == snapshot
    assert first == second
    assert first is not tasks
