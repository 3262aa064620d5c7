"""
Unit tests for task analytics.
"""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError
from backend.models import Task
from backend.todo_analytics import (
    NO_TASKS_MESSAGES,
    analyze_tasks,
    ceil_days,
    format_rate,
    time_slot_for_hour,
)

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)  # Wednesday
KST = timezone(timedelta(hours=9))


def make_task(title, due_at, priority="medium", category="other", completed=False):
    return Task(title=title, due_at=due_at, priority=priority, category=category, completed=completed)


@pytest.fixture
def four_tasks():
    """Three completed tasks and one overdue high-priority task."""
    return [
        make_task("Write report", datetime(2024, 1, 8, 12, 0, tzinfo=timezone.utc), "medium", "work", True),
        make_task("Send invoice", datetime(2024, 1, 9, 10, 0, tzinfo=timezone.utc), "medium", "work", True),
        make_task("Go running", datetime(2024, 1, 9, 7, 0, tzinfo=timezone.utc), "high", "health", True),
        make_task("Fix production bug", datetime(2024, 1, 9, 12, 0, tzinfo=timezone.utc), "high", "work", False),
    ]


class TestFormatRate:
    @pytest.mark.parametrize("completed,total,expected", [
        (3, 4, "75.0"),
        (1, 3, "33.3"),
        (2, 3, "66.7"),
        (1, 16, "6.3"),
        (0, 5, "0.0"),
        (5, 5, "100.0"),
        (0, 0, "0"),
    ])
    def test_rates(self, completed, total, expected):
        assert format_rate(completed, total) == expected


class TestCeilDays:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(hours=1), 1),
        (timedelta(hours=-1), 0),
        (timedelta(days=1), 1),
        (timedelta(days=1, milliseconds=1), 2),
        (timedelta(days=-1), -1),
        (timedelta(0), 0),
    ])
    def test_ceiling(self, delta, expected):
        assert ceil_days(delta) == expected


class TestTimeSlots:
    @pytest.mark.parametrize("hour,slot", [
        (0, "night"), (5, "night"), (6, "morning"), (11, "morning"),
        (12, "afternoon"), (17, "afternoon"), (18, "evening"), (23, "evening"),
    ])
    def test_slot_boundaries(self, hour, slot):
        assert time_slot_for_hour(hour) == slot


class TestEmptyCollection:
    def test_zeros(self):
        snapshot = analyze_tasks([], NOW, "today")
        assert snapshot.empty is True
        assert snapshot.total == 0
        assert snapshot.completed == 0
        assert snapshot.completion_rate == "0"
        assert snapshot.overdue_tasks == []
        assert snapshot.urgent_tasks == []
        assert all(stats.rate == "0" for stats in snapshot.priority_stats.values())

    @pytest.mark.parametrize("period", ["today", "week"])
    def test_message_per_period(self, period):
        assert analyze_tasks([], NOW, period).message == NO_TASKS_MESSAGES[period]


class TestFourTaskExample:
    def test_counts(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "today")
        assert snapshot.total == 4
        assert snapshot.completed == 3
        assert snapshot.pending == 1
        assert snapshot.completion_rate == "75.0"

    def test_overdue(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "today")
        assert len(snapshot.overdue_tasks) == 1
        overdue = snapshot.overdue_tasks[0]
        assert overdue.title == "Fix production bug"
        assert overdue.days_overdue == 1
        assert overdue.category == "work"

    def test_overdue_high_priority_is_not_urgent(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "today")
        assert snapshot.urgent_tasks == []

    def test_priority_stats(self, four_tasks):
        stats = analyze_tasks(four_tasks, NOW, "today").priority_stats
        assert (stats["high"].total, stats["high"].completed, stats["high"].rate) == (2, 1, "50.0")
        assert (stats["medium"].total, stats["medium"].completed, stats["medium"].rate) == (2, 2, "100.0")
        assert (stats["low"].total, stats["low"].completed, stats["low"].rate) == (0, 0, "0")

    def test_category_stats(self, four_tasks):
        stats = analyze_tasks(four_tasks, NOW, "week").category_stats
        assert set(stats) == {"work", "health"}
        assert stats["work"].rate == "66.7"
        assert stats["health"].rate == "100.0"

    def test_on_time(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "today")
        assert snapshot.on_time_completed == 3
        assert snapshot.on_time_rate == "100.0"

    def test_time_of_day(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "today")
        assert snapshot.time_distribution == {"morning": 0, "afternoon": 1, "evening": 0, "night": 0}
        assert snapshot.most_productive_time.name == "morning"
        assert snapshot.most_productive_time.rate == 100.0
        assert snapshot.most_productive_time.count == 2

    def test_weekday(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "week")
        assert snapshot.weekday_completion["Tuesday"].total == 3
        assert snapshot.weekday_completion["Tuesday"].rate == "66.7"
        assert snapshot.most_productive_weekday.name == "Monday"

    def test_no_category_patterns(self, four_tasks):
        snapshot = analyze_tasks(four_tasks, NOW, "week")
        assert snapshot.postponed_categories == []
        assert snapshot.easy_categories == []

    def test_task_lines(self, four_tasks):
        lines = analyze_tasks(four_tasks, NOW, "today").task_lines
        assert [line.title for line in lines] == [t.title for t in four_tasks]
        assert [line.overdue for line in lines] == [False, False, False, True]
        assert lines[3].due_date == "2024-01-09"
        assert lines[3].days_until == -1

    def test_pure(self, four_tasks):
        before = [t.model_copy() for t in four_tasks]
        first = analyze_tasks(four_tasks, NOW, "today")
        second = analyze_tasks(four_tasks, NOW, "today")
        assert first == second
        assert four_tasks == before


class TestUrgentAndUpcoming:
    def test_high_priority_due_soon_is_urgent(self):
        tasks = [
            make_task("Due in an hour", NOW + timedelta(hours=1), "high"),
            make_task("Due in two days", NOW + timedelta(days=2), "high"),
            make_task("Just past two days", NOW + timedelta(days=2, seconds=1), "high"),
            make_task("Medium soon", NOW + timedelta(hours=1), "medium"),
            make_task("Done soon", NOW + timedelta(hours=1), "high", completed=True),
            make_task("Overdue high", NOW - timedelta(hours=1), "high"),
        ]
        snapshot = analyze_tasks(tasks, NOW, "today")
        assert snapshot.urgent_tasks == ["Due in an hour", "Due in two days"]

    def test_upcoming_window(self):
        tasks = [
            make_task("In an hour", NOW + timedelta(hours=1)),
            make_task("An hour ago", NOW - timedelta(hours=1)),
            make_task("Three days", NOW + timedelta(days=3)),
            make_task("Three days and a minute", NOW + timedelta(days=3, minutes=1)),
            make_task("Yesterday", NOW - timedelta(days=1)),
            make_task("Done tomorrow", NOW + timedelta(days=1), completed=True),
        ]
        snapshot = analyze_tasks(tasks, NOW, "today")
        assert [(d.title, d.days_until) for d in snapshot.upcoming_deadlines] == [
            ("In an hour", 1),
            ("An hour ago", 0),
            ("Three days", 3),
        ]

    def test_an_hour_late_is_one_day_overdue(self):
        snapshot = analyze_tasks([make_task("Late", NOW - timedelta(hours=1))], NOW, "today")
        assert snapshot.overdue_tasks[0].days_overdue == 1


class TestCategoryPatterns:
    def test_easy_and_postponed(self):
        due = NOW + timedelta(days=1)
        tasks = (
            [make_task(f"Learn {i}", due, category="learning", completed=i < 3) for i in range(4)]
            + [make_task(f"Walk {i}", due, category="health", completed=True) for i in range(2)]
            + [make_task(f"Errand {i}", due, category="personal", completed=i == 0) for i in range(3)]
            + [make_task(f"Work {i}", due, category="work", completed=i == 0) for i in range(2)]
            + [make_task("Misc", due, category="other")]
        )
        snapshot = analyze_tasks(tasks, NOW, "week")
        assert snapshot.easy_categories == ["health", "learning"]
        assert snapshot.postponed_categories == ["personal"]


class TestLocalTime:
    def test_buckets_use_timezone_of_now(self):
        # 00:30 UTC is 09:30 in Seoul
        task = make_task("Standup", datetime(2024, 1, 10, 0, 30, tzinfo=timezone.utc))
        seoul_now = datetime(2024, 1, 10, 8, 0, tzinfo=KST)
        utc_now = datetime(2024, 1, 9, 23, 0, tzinfo=timezone.utc)
        assert analyze_tasks([task], seoul_now, "today").time_distribution["morning"] == 1
        assert analyze_tasks([task], utc_now, "today").time_distribution["night"] == 1

    def test_weekday_ties_broken_by_count(self):
        tasks = [
            make_task("Mon 1", datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc), completed=True),
            make_task("Mon 2", datetime(2024, 1, 8, 11, 0, tzinfo=timezone.utc), completed=True),
            make_task("Tue 1", datetime(2024, 1, 9, 10, 0, tzinfo=timezone.utc), completed=True),
        ]
        best = analyze_tasks(tasks, NOW, "week").most_productive_weekday
        assert best.name == "Monday"
        assert best.count == 2


class TestValidation:
    def test_bad_period(self):
        with pytest.raises(ValueError):
            analyze_tasks([], NOW, "month")

    def test_naive_due_rejected(self):
        with pytest.raises(ValidationError):
            Task(title="Naive", due_at=datetime(2024, 1, 10, 9, 0))

    def test_due_date_alias(self):
        task = Task.model_validate({"title": "Call mom", "due_date": "2024-01-10T09:00:00+09:00"})
        assert task.due_at == datetime(2024, 1, 10, 0, 0, tzinfo=timezone.utc)
        assert task.priority == "medium"
        assert task.category == "other"
