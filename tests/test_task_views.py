# tests/test_task_views.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from taskdeck.tasks.task_models import (
    Category,
    FilterType,
    Priority,
    Recurrence,
    TaskFilters,
)
from taskdeck.tasks.task_views import (
    compute_stats,
    filter_tasks,
    priority_distribution,
    productivity_streak,
    sort_tasks,
    visible_tasks,
)

from .fakes import make_task

NOW = datetime(2024, 1, 10, 15, 0, tzinfo=UTC)
YESTERDAY = NOW - timedelta(days=1)
TOMORROW = NOW + timedelta(days=1)


def _ids(tasks) -> list[str]:
    return [t.id for t in tasks]


def test_type_filters() -> None:
    active = make_task(id="active")
    done = make_task(id="done", completed=True, completed_at=NOW)
    today = make_task(id="today", due_date=NOW.replace(hour=0))
    upcoming = make_task(id="upcoming", due_date=TOMORROW)
    upcoming_done = make_task(id="upcoming-done", due_date=TOMORROW, completed=True, completed_at=NOW)
    past = make_task(id="past", due_date=YESTERDAY)
    tasks = [active, done, today, upcoming, upcoming_done, past]

    def run(kind: FilterType) -> list[str]:
        return _ids(filter_tasks(tasks, TaskFilters(type=kind), NOW))

    assert run(FilterType.ALL) == _ids(tasks)
    assert run(FilterType.ACTIVE) == ["active", "today", "upcoming", "past"]
    assert run(FilterType.COMPLETED) == ["done", "upcoming-done"]
    assert run(FilterType.TODAY) == ["today"]
    assert run(FilterType.UPCOMING) == ["upcoming"]


def test_later_today_is_not_upcoming() -> None:
    later = make_task(due_date=NOW + timedelta(hours=5))
    assert filter_tasks([later], TaskFilters(type=FilterType.UPCOMING), NOW) == []
    assert filter_tasks([later], TaskFilters(type=FilterType.TODAY), NOW) == [later]


def test_today_uses_clock_timezone() -> None:
    tz = timezone(timedelta(hours=-5))
    now = datetime(2024, 1, 10, 20, 0, tzinfo=tz)
    # 2024-01-11 00:30 UTC is still Jan 10 in UTC-5.
    due = make_task(due_date=datetime(2024, 1, 11, 0, 30, tzinfo=UTC))
    assert filter_tasks([due], TaskFilters(type=FilterType.TODAY), now) == [due]


def test_priority_category_and_search_filters() -> None:
    a = make_task(id="a", title="Buy MILK", priority=Priority.HIGH, category=Category.SHOPPING)
    b = make_task(id="b", description="call the dentist", category=Category.HEALTH)
    c = make_task(id="c", tags=("Urgent", "home"), priority=Priority.HIGH)
    tasks = [a, b, c]

    assert _ids(filter_tasks(tasks, TaskFilters(priority=Priority.HIGH), NOW)) == ["a", "c"]
    assert _ids(filter_tasks(tasks, TaskFilters(category=Category.HEALTH), NOW)) == ["b"]
    assert _ids(filter_tasks(tasks, TaskFilters(search_query="milk"), NOW)) == ["a"]
    assert _ids(filter_tasks(tasks, TaskFilters(search_query="DENT"), NOW)) == ["b"]
    assert _ids(filter_tasks(tasks, TaskFilters(search_query="urg"), NOW)) == ["c"]
    assert _ids(
        filter_tasks(tasks, TaskFilters(priority=Priority.HIGH, search_query="home"), NOW)
    ) == ["c"]


def test_filtering_is_idempotent() -> None:
    tasks = [make_task(title=f"t{i}", priority=list(Priority)[i % 3]) for i in range(9)]
    f = TaskFilters(type=FilterType.ACTIVE, priority=Priority.LOW, search_query="t")
    once = filter_tasks(tasks, f, NOW)
    assert filter_tasks(tasks, f, NOW) == once
    assert filter_tasks(once, f, NOW) == once


def test_sort_dated_before_undated_and_high_before_low() -> None:
    a = make_task(id="A", priority=Priority.HIGH)
    b = make_task(id="B", priority=Priority.HIGH, due_date=datetime(2024, 2, 1, tzinfo=UTC))
    c = make_task(id="C", priority=Priority.LOW)

    assert _ids(sort_tasks([a, b, c])) == ["B", "A", "C"]
    assert _ids(sort_tasks([c, a, b])) == ["B", "A", "C"]


def test_sort_completed_last_then_earlier_due_then_newest() -> None:
    done = make_task(id="done", priority=Priority.HIGH, completed=True, completed_at=NOW)
    late = make_task(id="late", due_date=NOW + timedelta(days=3))
    soon = make_task(id="soon", due_date=NOW + timedelta(days=1))
    old = make_task(id="old", created_at=NOW - timedelta(days=2))
    new = make_task(id="new", created_at=NOW)

    assert _ids(sort_tasks([done, old, late, new, soon])) == ["soon", "late", "new", "old", "done"]


def test_visible_tasks_filters_then_sorts_and_is_memoized() -> None:
    a = make_task(id="A", priority=Priority.LOW)
    b = make_task(id="B", priority=Priority.HIGH)
    done = make_task(id="D", completed=True, completed_at=NOW)
    f = TaskFilters(type=FilterType.ACTIVE)

    first = visible_tasks([a, b, done], f, NOW)
    assert _ids(first) == ["B", "A"]
    assert visible_tasks((a, b, done), f, NOW) is first


def test_stats_completion_rate() -> None:
    tasks = [make_task(completed=i < 4, completed_at=NOW if i < 4 else None) for i in range(10)]
    stats = compute_stats(tasks, NOW)
    assert stats.total == 10
    assert stats.completed == 4
    assert stats.pending == 6
    assert stats.completion_rate == 40

    assert compute_stats([], NOW).completion_rate == 0


def test_stats_rounds_half_up() -> None:
    tasks = [make_task(completed=True, completed_at=NOW)] + [make_task() for _ in range(7)]
    # 1/8 = 12.5%
    assert compute_stats(tasks, NOW).completion_rate == 13


def test_overdue_and_due_today_classification() -> None:
    overdue = make_task(due_date=YESTERDAY)
    today = make_task(due_date=NOW)
    done_yesterday = make_task(due_date=YESTERDAY, completed=True, completed_at=NOW)

    stats = compute_stats([overdue], NOW)
    assert (stats.overdue, stats.due_today) == (1, 0)

    stats = compute_stats([today], NOW)
    assert (stats.overdue, stats.due_today) == (0, 1)

    stats = compute_stats([done_yesterday], NOW)
    assert (stats.overdue, stats.due_today) == (0, 0)


def test_stats_priority_and_recurring_count_pending_only() -> None:
    tasks = [
        make_task(priority=Priority.HIGH),
        make_task(priority=Priority.HIGH, completed=True, completed_at=NOW),
        make_task(priority=Priority.MEDIUM, recurrence=Recurrence.DAILY),
        make_task(priority=Priority.LOW, recurrence=Recurrence.WEEKLY, completed=True, completed_at=NOW),
    ]
    stats = compute_stats(tasks, NOW)
    assert (stats.high_priority, stats.medium_priority, stats.low_priority) == (1, 1, 0)
    assert stats.recurring == 1


def test_priority_distribution() -> None:
    tasks = [make_task(priority=Priority.HIGH), make_task(priority=Priority.LOW), make_task(priority=Priority.LOW)]
    dist = priority_distribution(compute_stats(tasks, NOW))
    assert dist == {Priority.HIGH: 33, Priority.MEDIUM: 0, Priority.LOW: 67}
    assert set(priority_distribution(compute_stats([], NOW)).values()) == {0}


def _done_on(day_offset: int):
    at = NOW - timedelta(days=day_offset)
    return make_task(completed=True, completed_at=at)


def test_streak_counts_consecutive_days_from_today() -> None:
    tasks = [_done_on(0), _done_on(0), _done_on(1), _done_on(2), _done_on(5)]
    assert productivity_streak(tasks, NOW) == 3


def test_streak_may_start_yesterday() -> None:
    assert productivity_streak([_done_on(1), _done_on(2)], NOW) == 2


def test_streak_broken_by_older_gap() -> None:
    assert productivity_streak([_done_on(2)], NOW) == 0
    assert productivity_streak([], NOW) == 0
    assert productivity_streak([make_task()], NOW) == 0


def test_priority_distribution_rounds_half_up() -> None:
    tasks = [make_task(priority=Priority.HIGH)] + [make_task(priority=Priority.MEDIUM) for _ in range(7)]
    # 1/8 = 12.5%, 7/8 = 87.5%
    dist = priority_distribution(compute_stats(tasks, NOW))
    assert dist == {Priority.HIGH: 13, Priority.MEDIUM: 88, Priority.LOW: 0}
