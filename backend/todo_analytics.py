"""
Task analytics for the summary feature.

analyze_tasks() is a pure function of (tasks, now, period): it never reads the
clock and never mutates its input. Local hours and weekdays are taken in the
timezone carried by `now`.
"""
import math
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from backend.date_refs import WEEKDAY_NAMES, sunday_weekday
from backend.models import (
    PRIORITIES,
    AnalyticsSnapshot,
    BucketStats,
    OverdueTask,
    ProductiveBucket,
    Task,
    TaskLine,
    UpcomingDeadline,
)

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

URGENT_WINDOW_DAYS = 2
UPCOMING_WINDOW_DAYS = 3

POSTPONED_RATE_THRESHOLD = 50
EASY_RATE_THRESHOLD = 70
MIN_CATEGORY_SAMPLES = 2

# (name, start hour inclusive, end hour exclusive)
TIME_SLOTS = [
    ("morning", 6, 12),
    ("afternoon", 12, 18),
    ("evening", 18, 24),
    ("night", 0, 6),
]

NO_TASKS_MESSAGES = {
    "today": "There are no tasks registered for today.",
    "week": "There are no tasks registered for this week.",
}


def format_rate(completed: int, total: int) -> str:
    """Percentage with one decimal place, rounded half-up; "0" when total is 0."""
    if total <= 0:
        return "0"
    value = Decimal(completed / total * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return str(value)


def ceil_days(delta: timedelta) -> int:
    """Ceiling of a time delta in whole days, computed on milliseconds."""
    delta_ms = delta // timedelta(milliseconds=1)
    return math.ceil(delta_ms / DAY_MS)


def time_slot_for_hour(hour: int) -> str:
    for name, start, end in TIME_SLOTS:
        if start <= hour < end:
            return name
    return "night"


def _bucket(total: int, completed: int) -> BucketStats:
    return BucketStats(total=total, completed=completed, rate=format_rate(completed, total))


def _tally(tasks: Iterable[Task], key, keys: Optional[List[str]] = None) -> Dict[str, BucketStats]:
    counts: Dict[str, List[int]] = {k: [0, 0] for k in (keys or [])}
    for task in tasks:
        bucket = counts.setdefault(key(task), [0, 0])
        bucket[0] += 1
        if task.completed:
            bucket[1] += 1
    return {name: _bucket(total, completed) for name, (total, completed) in counts.items()}


def _most_productive(stats: Dict[str, BucketStats], skip_empty: bool) -> Optional[ProductiveBucket]:
    """Highest completion rate, ties broken by completed count, then by bucket order."""
    candidates = [
        ProductiveBucket(
            name=name,
            rate=(data.completed / data.total * 100) if data.total > 0 else 0.0,
            count=data.completed,
        )
        for name, data in stats.items()
        if data.total > 0 or not skip_empty
    ]
    if not candidates:
        return None
    return sorted(candidates, key=lambda c: (-c.rate, -c.count))[0]


def _local(task: Task, now: datetime) -> datetime:
    return task.due_at.astimezone(now.tzinfo)


def _completed_on_time(task: Task) -> bool:
    # Tasks carry no completion timestamp; the due date stands in for it
    completed_at = task.due_at
    return completed_at <= task.due_at


def _empty_snapshot(now: datetime, period: str) -> AnalyticsSnapshot:
    return AnalyticsSnapshot(
        period=period,
        generated_at=now,
        empty=True,
        message=NO_TASKS_MESSAGES[period],
        priority_stats={p: BucketStats() for p in PRIORITIES},
        time_distribution={name: 0 for name, _, _ in TIME_SLOTS},
        time_completion={name: BucketStats() for name, _, _ in TIME_SLOTS},
        weekday_completion={day: BucketStats() for day in WEEKDAY_NAMES},
    )


def analyze_tasks(tasks: List[Task], now: datetime, period: str = "today") -> AnalyticsSnapshot:
    """
    Compute the analytics snapshot for a task collection.

    Day differences use the ceiling of (milliseconds / one day), so a task due
    in one hour is "1 day" away and a task due one hour ago is "0 days" away.

    The on-time figure uses the due date as a stand-in for the completion time,
    since tasks carry no completion timestamp; every completed task counts as
    on time.
    """
    if period not in NO_TASKS_MESSAGES:
        raise ValueError(f"period must be 'today' or 'week', got {period!r}")

    tasks = list(tasks)
    if not tasks:
        logger.info(f"No tasks to analyze for period '{period}'")
        return _empty_snapshot(now, period)

    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)

    priority_stats = _tally(tasks, lambda t: t.priority, keys=list(PRIORITIES))
    category_stats = _tally(tasks, lambda t: t.category)

    on_time_completed = sum(1 for t in tasks if t.completed and _completed_on_time(t))

    overdue_tasks = [
        OverdueTask(title=t.title, days_overdue=ceil_days(now - t.due_at), category=t.category)
        for t in tasks
        if not t.completed and t.due_at < now
    ]

    urgent_tasks = [
        t.title
        for t in tasks
        if not t.completed
        and t.priority == "high"
        and t.due_at >= now
        and ceil_days(t.due_at - now) <= URGENT_WINDOW_DAYS
    ]

    time_distribution = {name: 0 for name, _, _ in TIME_SLOTS}
    for t in tasks:
        if not t.completed:
            time_distribution[time_slot_for_hour(_local(t, now).hour)] += 1
    time_completion = _tally(
        tasks,
        lambda t: time_slot_for_hour(_local(t, now).hour),
        keys=[name for name, _, _ in TIME_SLOTS],
    )
    weekday_completion = _tally(
        tasks,
        lambda t: WEEKDAY_NAMES[sunday_weekday(_local(t, now))],
        keys=list(WEEKDAY_NAMES),
    )

    postponed_categories = []
    easy = []
    for category, data in category_stats.items():
        if data.total < MIN_CATEGORY_SAMPLES:
            continue
        rate = data.completed / data.total * 100
        if float(data.rate) < POSTPONED_RATE_THRESHOLD:
            postponed_categories.append(category)
        if rate >= EASY_RATE_THRESHOLD:
            easy.append((category, rate))
    easy_categories = [category for category, _ in sorted(easy, key=lambda item: -item[1])]

    upcoming_deadlines = []
    for t in tasks:
        if t.completed:
            continue
        days_until = ceil_days(t.due_at - now)
        if 0 <= days_until <= UPCOMING_WINDOW_DAYS:
            upcoming_deadlines.append(UpcomingDeadline(title=t.title, days_until=days_until))

    task_lines = [
        TaskLine(
            title=t.title,
            completed=t.completed,
            overdue=not t.completed and t.due_at < now,
            priority=t.priority,
            category=t.category,
            due_date=_local(t, now).date().isoformat(),
            days_until=ceil_days(t.due_at - now),
        )
        for t in tasks
    ]

    snapshot = AnalyticsSnapshot(
        period=period,
        generated_at=now,
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=format_rate(completed, total),
        priority_stats=priority_stats,
        category_stats=category_stats,
        on_time_completed=on_time_completed,
        on_time_rate=format_rate(on_time_completed, completed),
        overdue_tasks=overdue_tasks,
        urgent_tasks=urgent_tasks,
        time_distribution=time_distribution,
        time_completion=time_completion,
        weekday_completion=weekday_completion,
        most_productive_time=_most_productive(time_completion, skip_empty=False),
        most_productive_weekday=_most_productive(weekday_completion, skip_empty=True),
        postponed_categories=postponed_categories,
        easy_categories=easy_categories,
        upcoming_deadlines=upcoming_deadlines,
        task_lines=task_lines,
    )
    logger.info(
        f"📊 Analyzed {total} tasks ({period}): completion {snapshot.completion_rate}%, "
        f"{len(overdue_tasks)} overdue, {len(urgent_tasks)} urgent, {len(upcoming_deadlines)} upcoming"
    )
    return snapshot
