"""Occurrence Engine - Expand recurring task definitions into weekly instances.

Uses `dateutil.rrule` for the recurrence patterns (DAILY, WEEKLY by weekday,
MONTHLY by month day), bounded to the 7 days starting at week_start.

Each instance carries absolute preferred windows (HH:MM bound to the
occurrence date in the engine time zone, UTC by default) and a priority that
decides the order in which the assignment engine places instances:

    priority = max(0, 100 - average window width in minutes)   [if windows]
             + fairness_weight * 20
             + duration_min / 10

Narrow windows, heavy tasks and long tasks are placed first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any, ClassVar

from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, rrule

from .. import const
from ..exceptions import ScheduleConfigError
from ..utils.dt_utils import (
    bind_time_to_date,
    dt_to_date,
    interval_within,
    time_of_day_minutes,
)
from .constraint_engine import TaskConstraints

if TYPE_CHECKING:
    from collections.abc import Iterable
    from zoneinfo import ZoneInfo

    from ..type_defs import FrequencyConfig, TaskData, TimeWindowData


# =============================================================================
# INSTANCE DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True)
class TimeWindow:
    """Absolute preferred window of one task instance (aware UTC datetimes)."""

    start: datetime
    end: datetime

    @property
    def width_minutes(self) -> float:
        """Window width in minutes."""
        return (self.end - self.start).total_seconds() / 60

    def contains(self, start: datetime, end: datetime) -> bool:
        """Return True if [start, end) lies fully inside this window."""
        return interval_within(start, end, self.start, self.end)

    def as_dict(self) -> dict[str, str]:
        """Return ISO-formatted window bounds."""
        return {
            const.DATA_WINDOW_START: self.start.isoformat(),
            const.DATA_WINDOW_END: self.end.isoformat(),
        }


@dataclass(frozen=True)
class TaskInstance:
    """One concrete dated occurrence of a task definition.

    Attributes:
        task_id: Source task definition
        name: Task name (used in conflict messages)
        occurrence_date: Date the instance belongs to
        duration_min: Duration copied from the definition (> 0)
        fairness_weight: Workload multiplier copied from the definition
        preferred_windows: Absolute windows bound to occurrence_date
        constraints: Normalized eligibility rules, or None
        rotation_roster: Eligible member ids (empty = any member)
        priority: Processing priority (higher first)
    """

    task_id: str
    name: str
    occurrence_date: date
    duration_min: int
    fairness_weight: int
    preferred_windows: tuple[TimeWindow, ...]
    constraints: TaskConstraints | None = None
    rotation_roster: tuple[str, ...] = field(default_factory=tuple)
    priority: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation."""
        return {
            const.DATA_TASK_ID: self.task_id,
            const.DATA_TASK_NAME: self.name,
            "occurrence_date": self.occurrence_date.isoformat(),
            const.DATA_TASK_DURATION_MIN: self.duration_min,
            const.DATA_TASK_FAIRNESS_WEIGHT: self.fairness_weight,
            "preferred_windows": [w.as_dict() for w in self.preferred_windows],
            const.DATA_TASK_CONSTRAINTS: (
                self.constraints.as_dict() if self.constraints else None
            ),
            const.DATA_TASK_ROTATION_ROSTER: list(self.rotation_roster),
            "priority": self.priority,
        }


# =============================================================================
# OCCURRENCE ENGINE
# =============================================================================


class OccurrenceEngine:
    """Expands task definitions into TaskInstances for one week.

    The engine holds only the time zone used for binding windows; it keeps
    no state between calls.
    """

    # Definition weekday numbering is 0=Sunday .. 6=Saturday
    WEEKDAY_TO_RRULE: ClassVar[list[Any]] = [SU, MO, TU, WE, TH, FR, SA]

    def __init__(self, tz: ZoneInfo | None = None) -> None:
        """Initialize the engine.

        Args:
            tz: Time zone used to bind HH:MM windows. Defaults to the
                dt_utils default time zone (UTC unless reconfigured).
        """
        self._tz = tz

    def expand_tasks_for_week(
        self, tasks: Iterable[TaskData], week_start: date | datetime
    ) -> list[TaskInstance]:
        """Expand active task definitions into instances for the week.

        Args:
            tasks: Task definitions (inactive ones are skipped)
            week_start: First day of the 7-day week

        Returns:
            Instances sorted by priority descending, then task_id and
            occurrence date ascending.

        Raises:
            ScheduleConfigError: For unsupported recurrence types, non-positive
                durations, or malformed time windows.
        """
        start_date = dt_to_date(week_start, self._tz)
        instances: list[TaskInstance] = []

        for task in tasks:
            if not task.get(const.DATA_TASK_ACTIVE, True):
                const.LOGGER.debug(
                    "OccurrenceEngine: Skipping inactive task %s",
                    task.get(const.DATA_TASK_ID),
                )
                continue

            self._check_duration(task)
            self._check_windows(task)
            occurrence_dates = self.get_occurrence_dates(task, start_date)
            priority = self.calculate_task_priority(task)
            constraints = TaskConstraints.from_data(
                task.get(const.DATA_TASK_CONSTRAINTS)
            )
            roster = tuple(task.get(const.DATA_TASK_ROTATION_ROSTER) or ())

            for occurrence_date in occurrence_dates:
                instances.append(
                    TaskInstance(
                        task_id=task[const.DATA_TASK_ID],
                        name=task[const.DATA_TASK_NAME],
                        occurrence_date=occurrence_date,
                        duration_min=task[const.DATA_TASK_DURATION_MIN],
                        fairness_weight=task.get(
                            const.DATA_TASK_FAIRNESS_WEIGHT,
                            const.DEFAULT_FAIRNESS_WEIGHT,
                        ),
                        preferred_windows=self.build_preferred_windows(
                            task, occurrence_date
                        ),
                        constraints=constraints,
                        rotation_roster=roster,
                        priority=priority,
                    )
                )

        instances.sort(key=lambda i: (-i.priority, i.task_id, i.occurrence_date))

        const.LOGGER.debug(
            "OccurrenceEngine: Expanded %d instance(s) for week of %s",
            len(instances),
            start_date.isoformat(),
        )
        return instances

    def get_occurrence_dates(self, task: TaskData, week_start: date) -> list[date]:
        """Return the dates inside [week_start, week_start + 7d) matching the rule.

        Raises:
            ScheduleConfigError: If the recurrence type cannot be expanded.
        """
        frequency: FrequencyConfig = task.get(const.DATA_TASK_FREQUENCY) or {}
        freq_type = frequency.get(const.DATA_FREQUENCY_TYPE)

        if freq_type not in const.SUPPORTED_FREQUENCIES:
            raise ScheduleConfigError(
                const.ERROR_UNSUPPORTED_FREQUENCY_FMT.format(
                    name=task.get(const.DATA_TASK_NAME), frequency=freq_type
                ),
                task_id=task.get(const.DATA_TASK_ID),
            )

        dtstart = datetime.combine(week_start, datetime.min.time())
        until = dtstart + timedelta(days=const.DAYS_PER_WEEK - 1)

        if freq_type == const.FREQUENCY_DAILY:
            rule = rrule(DAILY, dtstart=dtstart, until=until)
        elif freq_type == const.FREQUENCY_WEEKLY:
            weekdays = sorted(
                {
                    d
                    for d in frequency.get(const.DATA_FREQUENCY_BY_WEEKDAY) or []
                    if const.WEEKDAY_SUNDAY <= d <= const.WEEKDAY_SATURDAY
                }
            )
            if not weekdays:
                return []
            # Type stubs expect weekday instances, rrule accepts the constants
            rule = rrule(
                WEEKLY,
                dtstart=dtstart,
                until=until,
                byweekday=[self.WEEKDAY_TO_RRULE[d] for d in weekdays],
            )
        else:
            month_day = frequency.get(const.DATA_FREQUENCY_BY_MONTH_DAY)
            if month_day is None:
                return []
            rule = rrule(MONTHLY, dtstart=dtstart, until=until, bymonthday=month_day)

        return [occurrence.date() for occurrence in rule]

    def build_preferred_windows(
        self, task: TaskData, occurrence_date: date
    ) -> tuple[TimeWindow, ...]:
        """Bind the definition's HH:MM windows to an occurrence date.

        A definition without windows gets a single all-day window
        (00:00-23:59).

        Raises:
            ScheduleConfigError: If a window is malformed or ends before it starts.
        """
        raw_windows: list[TimeWindowData] = task.get(const.DATA_TASK_TIME_WINDOWS) or [
            {
                "start": const.ALL_DAY_WINDOW_START,
                "end": const.ALL_DAY_WINDOW_END,
            }
        ]

        windows: list[TimeWindow] = []
        for raw in raw_windows:
            start_str = raw.get(const.DATA_WINDOW_START, "")
            end_str = raw.get(const.DATA_WINDOW_END, "")
            try:
                start = bind_time_to_date(occurrence_date, start_str, self._tz)
                end = bind_time_to_date(occurrence_date, end_str, self._tz)
            except ValueError as err:
                raise self._window_error(task, start_str, end_str) from err
            if end <= start:
                raise self._window_error(task, start_str, end_str)
            windows.append(TimeWindow(start=start, end=end))

        return tuple(windows)

    @staticmethod
    def calculate_task_priority(task: TaskData) -> float:
        """Calculate the processing priority of a task definition.

        Returns:
            Priority score; higher values are placed first.

        Examples:
            window 07:00-08:00, weight 1, 30 min → 40 + 20 + 3 = 63
            no windows, weight 2, 45 min → 0 + 40 + 4.5 = 44.5
        """
        priority = 0.0

        windows = task.get(const.DATA_TASK_TIME_WINDOWS) or []
        if windows:
            widths = [
                time_of_day_minutes(w[const.DATA_WINDOW_END])
                - time_of_day_minutes(w[const.DATA_WINDOW_START])
                for w in windows
            ]
            avg_width = sum(widths) / len(widths)
            priority += max(0.0, const.PRIORITY_WINDOW_BASELINE - avg_width)

        weight = task.get(
            const.DATA_TASK_FAIRNESS_WEIGHT, const.DEFAULT_FAIRNESS_WEIGHT
        )
        priority += weight * const.PRIORITY_FAIRNESS_FACTOR
        priority += (
            task[const.DATA_TASK_DURATION_MIN] / const.PRIORITY_DURATION_DIVISOR
        )
        return priority

    # =========================================================================
    # Private helpers
    # =========================================================================

    @staticmethod
    def _check_duration(task: TaskData) -> None:
        duration = task.get(const.DATA_TASK_DURATION_MIN)
        if (
            not isinstance(duration, int)
            or isinstance(duration, bool)
            or duration < const.MIN_TASK_DURATION_MIN
        ):
            raise ScheduleConfigError(
                const.ERROR_INVALID_DURATION_FMT.format(
                    name=task.get(const.DATA_TASK_NAME), duration=duration
                ),
                task_id=task.get(const.DATA_TASK_ID),
            )

    @staticmethod
    def _check_windows(task: TaskData) -> None:
        for raw in task.get(const.DATA_TASK_TIME_WINDOWS) or []:
            start_str = raw.get(const.DATA_WINDOW_START, "")
            end_str = raw.get(const.DATA_WINDOW_END, "")
            try:
                if time_of_day_minutes(end_str) > time_of_day_minutes(start_str):
                    continue
            except ValueError as err:
                raise OccurrenceEngine._window_error(task, start_str, end_str) from err
            raise OccurrenceEngine._window_error(task, start_str, end_str)

    @staticmethod
    def _window_error(task: TaskData, start: str, end: str) -> ScheduleConfigError:
        return ScheduleConfigError(
            const.ERROR_INVALID_WINDOW_FMT.format(
                name=task.get(const.DATA_TASK_NAME), start=start, end=end
            ),
            task_id=task.get(const.DATA_TASK_ID),
        )


def expand_tasks_for_week(
    tasks: Iterable[TaskData],
    week_start: date | datetime,
    tz: ZoneInfo | None = None,
) -> list[TaskInstance]:
    """Expand task definitions for the week starting at week_start.

    Thin wrapper around OccurrenceEngine for callers that do not need to
    keep an engine instance.
    """
    return OccurrenceEngine(tz).expand_tasks_for_week(tasks, week_start)
