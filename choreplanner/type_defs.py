"""Type definitions for ChorePlanner input data structures.

Inputs arrive as plain dicts loaded by the surrounding application (storage
rows, normalized calendar feeds). They are described here with TypedDict for
static analysis only; TypedDict does NOT enforce types at runtime. Runtime
checks live in validation.py (schemas) and at the availability boundary
(coerce_utils.py).

Values produced by the engines (TaskInstance, MemberAvailability,
AssignmentCandidate, SchedulingResult) are dataclasses defined next to the
engine that creates them.

IMPORTANT: This file must NOT import from engines/ to avoid circular
dependencies. Only typing machinery is imported here.
"""

from datetime import date, datetime
from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TaskId = str
MemberId = str
UserId = str
HouseholdId = str
ISODatetime = str  # ISO 8601 datetime string "2025-10-06T09:00:00+00:00"
TimeOfDay = str  # "HH:MM"

FairnessHistory = dict[UserId, float]


# =============================================================================
# Task Definitions
# =============================================================================


class FrequencyConfig(TypedDict):
    """Recurrence rule of a task definition, tagged by `type`.

    Only the key matching the type is meaningful:
    - daily: no extra keys
    - weekly: byWeekday (0=Sunday .. 6=Saturday)
    - monthly: byMonthDay (1..31)
    - custom: cron (not expandable, rejected by the occurrence engine)
    """

    type: Literal["daily", "weekly", "monthly", "custom"]
    byWeekday: NotRequired[list[int]]
    byMonthDay: NotRequired[int]
    cron: NotRequired[str]


class TimeWindowData(TypedDict):
    """Preferred time-of-day window, HH:MM strings."""

    start: TimeOfDay
    end: TimeOfDay


class TaskConstraintsData(TypedDict, total=False):
    """Eligibility rules for a task. All keys optional."""

    adultsOnly: bool
    requiredCapabilities: list[str]
    excludeAllergies: list[str]
    minimumAge: int


class TaskData(TypedDict):
    """A recurring chore definition (immutable engine input)."""

    task_id: TaskId
    household_id: HouseholdId
    name: str
    description: NotRequired[str | None]
    category: NotRequired[str | None]
    duration_min: int
    frequency: FrequencyConfig
    time_windows: list[TimeWindowData] | None
    constraints: TaskConstraintsData | None
    fairness_weight: int
    rotation_roster: list[MemberId]
    active: bool


# =============================================================================
# Members and Calendars
# =============================================================================


class MemberData(TypedDict):
    """A household member as loaded from storage.

    capabilities/allergies are deliberately loose: storage may hand over a
    list, a JSON-encoded string, or nothing at all.
    """

    id: MemberId
    household_id: NotRequired[HouseholdId]
    user_id: UserId
    role: NotRequired[str]
    capabilities: Any
    allergies: Any
    age: NotRequired[int | None]


class CalendarEventData(TypedDict):
    """A normalized calendar event for one user."""

    start: ISODatetime | datetime
    end: ISODatetime | datetime
    id: NotRequired[str]
    title: NotRequired[str]
    busy: NotRequired[bool]  # default True
    all_day: NotRequired[bool]  # default False


class FairnessRecord(TypedDict):
    """A completed (or skipped) assignment from a prior week's plan."""

    user_id: UserId
    week_start: ISODatetime | date | datetime
    status: Literal["pending", "done", "skipped"]
    duration_min: int
    fairness_weight: int
    plan_status: NotRequired[str]  # rows without it are treated as published


# =============================================================================
# Scheduling Context and Options
# =============================================================================


class SchedulingContext(TypedDict):
    """Single entry-point input for one household's weekly run."""

    week_start: date | datetime
    tasks: list[TaskData]
    members: list[MemberData]
    calendar_events: dict[UserId, list[CalendarEventData]]
    fairness_history: FairnessHistory


class EngineOptions(TypedDict, total=False):
    """Per-run overrides of the tuning defaults in const.py.

    All fields are optional (total=False); missing keys fall back to const.
    """

    buffer_minutes: int
    slot_stride_minutes: int
    fairness_cost_weight: float
    off_window_penalty: float
    time_zone: str  # IANA name, e.g. "Europe/Berlin"
