"""Unit tests for occurrence_engine.py OccurrenceEngine.

Test Categories:
- Daily / weekly / monthly expansion within one week
- Inactive definitions
- Window binding (explicit windows, all-day fallback, time zones)
- Priority calculation and ordering
- Configuration errors (custom recurrence, bad duration, bad windows)
"""

from __future__ import annotations

from datetime import date, timedelta
from zoneinfo import ZoneInfo

import pytest

from choreplanner.engines.occurrence_engine import (
    OccurrenceEngine,
    expand_tasks_for_week,
)
from choreplanner.exceptions import ScheduleConfigError
from tests.helpers import SATURDAY, WEEK_START, make_task, utc

# =============================================================================
# Expansion by recurrence type
# =============================================================================


class TestDailyExpansion:
    """Daily tasks produce one instance per day."""

    def test_daily_task_expands_to_seven_instances(self) -> None:
        """A daily task over a Monday week yields Monday through Sunday."""
        task = make_task(time_windows=[{"start": "07:00", "end": "08:00"}])

        instances = expand_tasks_for_week([task], WEEK_START)

        assert len(instances) == 7
        assert [i.occurrence_date for i in instances] == [
            WEEK_START + timedelta(days=n) for n in range(7)
        ]
        assert instances[0].name == "Walk the dog"

    def test_daily_task_any_week_start(self) -> None:
        """Expansion does not depend on which weekday the week starts."""
        task = make_task()

        instances = expand_tasks_for_week([task], date(2025, 10, 9))

        assert len(instances) == 7

    def test_instance_copies_definition_fields(self) -> None:
        """Duration, weight and roster come from the definition."""
        task = make_task(
            duration_min=45, fairness_weight=3, rotation_roster=["member-2"]
        )

        instance = expand_tasks_for_week([task], WEEK_START)[0]

        assert instance.duration_min == 45
        assert instance.fairness_weight == 3
        assert instance.rotation_roster == ("member-2",)
        assert instance.task_id == "task-1"


class TestWeeklyExpansion:
    """Weekly tasks match weekday numbers 0=Sunday .. 6=Saturday."""

    def test_saturday_only(self) -> None:
        """byWeekday=[6] gives exactly the Saturday of the week."""
        task = make_task(
            name="Clean bathroom",
            duration_min=45,
            frequency={"type": "weekly", "byWeekday": [6]},
            time_windows=[{"start": "10:00", "end": "12:00"}],
            constraints={"adultsOnly": True},
            fairness_weight=2,
        )

        instances = expand_tasks_for_week([task], WEEK_START)

        assert len(instances) == 1
        assert instances[0].occurrence_date == SATURDAY
        assert instances[0].name == "Clean bathroom"

    def test_sunday_is_zero(self) -> None:
        """Weekday 0 is Sunday, the last day of a Monday week."""
        task = make_task(frequency={"type": "weekly", "byWeekday": [0]})

        instances = expand_tasks_for_week([task], WEEK_START)

        assert [i.occurrence_date for i in instances] == [date(2025, 10, 12)]

    def test_multiple_weekdays(self) -> None:
        """Monday, Wednesday, Friday produce three instances."""
        task = make_task(frequency={"type": "weekly", "byWeekday": [1, 3, 5]})

        instances = expand_tasks_for_week([task], WEEK_START)

        assert sorted(i.occurrence_date for i in instances) == [
            date(2025, 10, 6),
            date(2025, 10, 8),
            date(2025, 10, 10),
        ]

    def test_empty_weekdays_yields_nothing(self) -> None:
        """A weekly rule without weekdays never occurs."""
        task = make_task(frequency={"type": "weekly", "byWeekday": []})

        assert expand_tasks_for_week([task], WEEK_START) == []


class TestMonthlyExpansion:
    """Monthly tasks occur only when their day of month is in the week."""

    def test_month_day_inside_week(self) -> None:
        """byMonthDay=8 falls on Wednesday Oct 8."""
        task = make_task(frequency={"type": "monthly", "byMonthDay": 8})

        instances = expand_tasks_for_week([task], WEEK_START)

        assert [i.occurrence_date for i in instances] == [date(2025, 10, 8)]

    def test_month_day_outside_week(self) -> None:
        """byMonthDay=20 does not occur in the week of Oct 6."""
        task = make_task(frequency={"type": "monthly", "byMonthDay": 20})

        assert expand_tasks_for_week([task], WEEK_START) == []

    def test_week_spanning_two_months(self) -> None:
        """Week of Sep 29 contains Oct 1."""
        task = make_task(frequency={"type": "monthly", "byMonthDay": 1})

        instances = expand_tasks_for_week([task], date(2025, 9, 29))

        assert [i.occurrence_date for i in instances] == [date(2025, 10, 1)]

    def test_day_31_skipped_in_short_month(self) -> None:
        """byMonthDay=31 has no occurrence in a November week."""
        task = make_task(frequency={"type": "monthly", "byMonthDay": 31})

        assert expand_tasks_for_week([task], date(2025, 11, 24)) == []


class TestInactiveTasks:
    """Inactive definitions never produce instances."""

    @pytest.mark.parametrize(
        "frequency",
        [
            {"type": "daily"},
            {"type": "weekly", "byWeekday": [1, 2]},
            {"type": "monthly", "byMonthDay": 7},
            {"type": "custom", "cron": "0 9 * * *"},
        ],
    )
    def test_inactive_skipped(self, frequency: dict) -> None:
        """Inactive tasks are skipped before their rule is looked at."""
        task = make_task(frequency=frequency, active=False)

        assert expand_tasks_for_week([task], WEEK_START) == []


# =============================================================================
# Window binding
# =============================================================================


class TestPreferredWindows:
    """HH:MM windows are bound to the occurrence date."""

    def test_windows_bound_in_utc(self) -> None:
        """Each window becomes absolute UTC datetimes on its date."""
        task = make_task(
            time_windows=[
                {"start": "07:00", "end": "08:00"},
                {"start": "18:30", "end": "19:15"},
            ]
        )

        instance = expand_tasks_for_week([task], WEEK_START)[1]

        assert instance.occurrence_date == date(2025, 10, 7)
        assert [(w.start, w.end) for w in instance.preferred_windows] == [
            (utc(2025, 10, 7, 7), utc(2025, 10, 7, 8)),
            (utc(2025, 10, 7, 18, 30), utc(2025, 10, 7, 19, 15)),
        ]

    def test_missing_windows_become_all_day(self) -> None:
        """No windows synthesizes 00:00-23:59."""
        task = make_task(time_windows=None)

        instance = expand_tasks_for_week([task], WEEK_START)[0]

        assert len(instance.preferred_windows) == 1
        window = instance.preferred_windows[0]
        assert window.start == utc(2025, 10, 6, 0, 0)
        assert window.end == utc(2025, 10, 6, 23, 59)

    def test_empty_window_list_becomes_all_day(self) -> None:
        """An empty list behaves like no windows."""
        task = make_task(time_windows=[])

        instance = expand_tasks_for_week([task], WEEK_START)[0]

        assert instance.preferred_windows[0].width_minutes == 23 * 60 + 59

    def test_local_time_zone_binding(self) -> None:
        """Windows bound in Europe/Berlin shift by the UTC offset."""
        task = make_task(time_windows=[{"start": "09:00", "end": "10:00"}])
        engine = OccurrenceEngine(ZoneInfo("Europe/Berlin"))

        instance = engine.expand_tasks_for_week([task], WEEK_START)[0]

        # CEST is UTC+2 in early October
        assert instance.preferred_windows[0].start == utc(2025, 10, 6, 7)
        assert instance.preferred_windows[0].end == utc(2025, 10, 6, 8)

    def test_window_contains(self) -> None:
        """contains() accepts slots touching both window edges."""
        task = make_task(time_windows=[{"start": "09:00", "end": "10:00"}])
        window = expand_tasks_for_week([task], WEEK_START)[0].preferred_windows[0]

        assert window.contains(utc(2025, 10, 6, 9), utc(2025, 10, 6, 10))
        assert not window.contains(utc(2025, 10, 6, 9, 45), utc(2025, 10, 6, 10, 15))


# =============================================================================
# Priority
# =============================================================================


class TestPriority:
    """Priority = window term + weight * 20 + duration / 10."""

    def test_narrow_window_priority(self) -> None:
        """60 minute window, weight 1, 30 min → 40 + 20 + 3."""
        task = make_task(time_windows=[{"start": "07:00", "end": "08:00"}])

        assert OccurrenceEngine.calculate_task_priority(task) == pytest.approx(63.0)

    def test_no_windows_has_no_window_term(self) -> None:
        """Without windows only weight and duration count."""
        task = make_task(duration_min=45, fairness_weight=2)

        assert OccurrenceEngine.calculate_task_priority(task) == pytest.approx(44.5)

    def test_wide_window_term_floors_at_zero(self) -> None:
        """Windows wider than 100 minutes add nothing."""
        task = make_task(
            duration_min=20, time_windows=[{"start": "08:00", "end": "12:00"}]
        )

        assert OccurrenceEngine.calculate_task_priority(task) == pytest.approx(22.0)

    def test_average_window_width(self) -> None:
        """Widths 30 and 90 average to 60 → window term 40."""
        task = make_task(
            duration_min=10,
            fairness_weight=0,
            time_windows=[
                {"start": "07:00", "end": "07:30"},
                {"start": "17:00", "end": "18:30"},
            ],
        )

        assert OccurrenceEngine.calculate_task_priority(task) == pytest.approx(41.0)

    def test_sorted_by_priority_descending(self) -> None:
        """Higher priority tasks come first."""
        low = make_task(task_id="low", duration_min=10)
        high = make_task(
            task_id="high",
            fairness_weight=3,
            time_windows=[{"start": "07:00", "end": "07:30"}],
        )

        instances = expand_tasks_for_week([low, high], WEEK_START)

        assert [i.task_id for i in instances[:7]] == ["high"] * 7
        assert [i.task_id for i in instances[7:]] == ["low"] * 7
        assert instances[0].priority > instances[-1].priority

    def test_ties_broken_by_task_id_then_date(self) -> None:
        """Equal priorities order by task_id, then occurrence date."""
        task_b = make_task(task_id="b")
        task_a = make_task(task_id="a")

        instances = expand_tasks_for_week([task_b, task_a], WEEK_START)

        keys = [(i.task_id, i.occurrence_date) for i in instances]
        assert keys == sorted(keys)
        assert keys[0] == ("a", WEEK_START)


# =============================================================================
# Configuration errors
# =============================================================================


class TestConfigurationErrors:
    """Malformed definitions are rejected with ScheduleConfigError."""

    def test_custom_recurrence_rejected(self) -> None:
        """Cron-style rules cannot be expanded."""
        task = make_task(
            name="Water plants", frequency={"type": "custom", "cron": "0 9 * * 1"}
        )

        with pytest.raises(ScheduleConfigError) as exc_info:
            expand_tasks_for_week([task], WEEK_START)

        assert "Water plants" in str(exc_info.value)
        assert "custom" in str(exc_info.value)
        assert exc_info.value.task_id == "task-1"

    def test_unknown_recurrence_rejected(self) -> None:
        """Unknown types are rejected the same way."""
        task = make_task(frequency={"type": "hourly"})

        with pytest.raises(ScheduleConfigError):
            expand_tasks_for_week([task], WEEK_START)

    @pytest.mark.parametrize("duration", [0, -15])
    def test_non_positive_duration_rejected(self, duration: int) -> None:
        """Durations must be positive."""
        task = make_task(duration_min=duration)

        with pytest.raises(ScheduleConfigError, match="invalid duration"):
            expand_tasks_for_week([task], WEEK_START)

    @pytest.mark.parametrize(
        "window",
        [
            {"start": "10:00", "end": "09:00"},
            {"start": "09:00", "end": "09:00"},
            {"start": "9am", "end": "10:00"},
            {"start": "09:00", "end": "24:00"},
        ],
    )
    def test_bad_window_rejected(self, window: dict) -> None:
        """Windows must be valid HH:MM with end after start."""
        task = make_task(time_windows=[window])

        with pytest.raises(ScheduleConfigError, match="invalid time window"):
            expand_tasks_for_week([task], WEEK_START)
