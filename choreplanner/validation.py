"""Input validation for ChorePlanner scheduling runs.

Schemas describe the structural shape of the scheduling context and engine
options. Voluptuous failures are re-raised as ScheduleConfigError so callers
only ever handle one error type for bad input.

Semantic checks that need more than one field (windows in order, Monday week
start, members present when tasks exist, unique member ids) are done after the
schema pass.
"""

from __future__ import annotations

from datetime import date, datetime
import math
from typing import TYPE_CHECKING, Any

import voluptuous as vol

from . import const
from .exceptions import ScheduleConfigError
from .utils.dt_utils import dt_parse, dt_to_date, resolve_time_zone

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from .type_defs import EngineOptions, SchedulingContext

# =============================================================================
# Field Validators
# =============================================================================

_NON_EMPTY_STRING = vol.All(str, vol.Length(min=1))
_TIME_OF_DAY = vol.All(str, vol.Match(const.TIME_OF_DAY_PATTERN))
_STRING_LIST = [str]


def _week_start(value: Any) -> date | datetime | str:
    """Accept a date, a datetime, or an ISO string for week_start.

    Date-only strings become a `date`. Datetime strings are only checked
    here; validate_context resolves naive ones in the engine time zone.
    """
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        if dt_parse(text) is not None:
            return text
    raise vol.Invalid(f"week_start must be a date or ISO datetime, got {value!r}")


def _finite(value: float) -> float:
    """Reject NaN and infinite numbers."""
    if not math.isfinite(value):
        raise vol.Invalid(f"expected a finite number, got {value!r}")
    return value


def _frequency_fields(value: dict[str, Any]) -> dict[str, Any]:
    """Require the rule key that belongs to the frequency type."""
    freq_type = value[const.DATA_FREQUENCY_TYPE]
    if (
        freq_type == const.FREQUENCY_WEEKLY
        and const.DATA_FREQUENCY_BY_WEEKDAY not in value
    ):
        raise vol.Invalid("weekly frequency requires byWeekday")
    if (
        freq_type == const.FREQUENCY_MONTHLY
        and const.DATA_FREQUENCY_BY_MONTH_DAY not in value
    ):
        raise vol.Invalid("monthly frequency requires byMonthDay")
    return value


# =============================================================================
# Schemas
# =============================================================================

FREQUENCY_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required(const.DATA_FREQUENCY_TYPE): vol.In(
                [*const.SUPPORTED_FREQUENCIES, const.FREQUENCY_CUSTOM]
            ),
            vol.Optional(const.DATA_FREQUENCY_BY_WEEKDAY): [
                vol.All(
                    int,
                    vol.Range(min=const.WEEKDAY_SUNDAY, max=const.WEEKDAY_SATURDAY),
                )
            ],
            vol.Optional(const.DATA_FREQUENCY_BY_MONTH_DAY): vol.All(
                int, vol.Range(min=const.MIN_MONTH_DAY, max=const.MAX_MONTH_DAY)
            ),
            vol.Optional(const.DATA_FREQUENCY_CRON): str,
        }
    ),
    _frequency_fields,
)

TIME_WINDOW_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_WINDOW_START): _TIME_OF_DAY,
        vol.Required(const.DATA_WINDOW_END): _TIME_OF_DAY,
    }
)

TASK_CONSTRAINTS_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_CONSTRAINT_ADULTS_ONLY): bool,
        vol.Optional(const.DATA_CONSTRAINT_REQUIRED_CAPABILITIES): _STRING_LIST,
        vol.Optional(const.DATA_CONSTRAINT_EXCLUDE_ALLERGIES): _STRING_LIST,
        vol.Optional(const.DATA_CONSTRAINT_MINIMUM_AGE): vol.All(
            int, vol.Range(min=0, max=const.MAX_MEMBER_AGE)
        ),
    }
)

TASK_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_TASK_ID): _NON_EMPTY_STRING,
        vol.Optional(const.DATA_TASK_HOUSEHOLD_ID): str,
        vol.Required(const.DATA_TASK_NAME): str,
        vol.Optional(const.DATA_TASK_DESCRIPTION): vol.Any(None, str),
        vol.Optional(const.DATA_TASK_CATEGORY): vol.Any(None, str),
        vol.Required(const.DATA_TASK_DURATION_MIN): vol.All(
            int, vol.Range(min=const.MIN_TASK_DURATION_MIN)
        ),
        vol.Required(const.DATA_TASK_FREQUENCY): FREQUENCY_SCHEMA,
        vol.Optional(const.DATA_TASK_TIME_WINDOWS, default=None): vol.Any(
            None, [TIME_WINDOW_SCHEMA]
        ),
        vol.Optional(const.DATA_TASK_CONSTRAINTS, default=None): vol.Any(
            None, TASK_CONSTRAINTS_SCHEMA
        ),
        vol.Optional(
            const.DATA_TASK_FAIRNESS_WEIGHT, default=const.DEFAULT_FAIRNESS_WEIGHT
        ): vol.All(int, vol.Range(min=const.MIN_FAIRNESS_WEIGHT)),
        vol.Optional(const.DATA_TASK_ROTATION_ROSTER, default=list): _STRING_LIST,
        vol.Optional(const.DATA_TASK_ACTIVE, default=True): bool,
    },
    extra=vol.ALLOW_EXTRA,
)

# capabilities/allergies stay loose here; coerce_utils normalizes them
MEMBER_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_MEMBER_ID): _NON_EMPTY_STRING,
        vol.Required(const.DATA_MEMBER_USER_ID): _NON_EMPTY_STRING,
        vol.Optional(const.DATA_MEMBER_HOUSEHOLD_ID): str,
        vol.Optional(const.DATA_MEMBER_ROLE): str,
        vol.Optional(const.DATA_MEMBER_CAPABILITIES, default=None): object,
        vol.Optional(const.DATA_MEMBER_ALLERGIES, default=None): object,
        vol.Optional(const.DATA_MEMBER_AGE, default=None): vol.Any(
            None, vol.All(int, vol.Range(min=0, max=const.MAX_MEMBER_AGE))
        ),
    },
    extra=vol.ALLOW_EXTRA,
)

# Individual events are parsed leniently by the availability engine
CONTEXT_SCHEMA = vol.Schema(
    {
        vol.Required(const.CONTEXT_WEEK_START): _week_start,
        vol.Optional(const.CONTEXT_TASKS, default=list): [dict],
        vol.Optional(const.CONTEXT_MEMBERS, default=list): [dict],
        vol.Optional(const.CONTEXT_CALENDAR_EVENTS, default=dict): {
            str: vol.Any(None, [dict])
        },
        vol.Optional(const.CONTEXT_FAIRNESS_HISTORY, default=dict): {
            str: vol.All(vol.Coerce(float), _finite, vol.Range(min=0))
        },
    },
    extra=vol.ALLOW_EXTRA,
)

OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.OPTION_BUFFER_MINUTES, default=const.DEFAULT_BUFFER_MINUTES
        ): vol.All(int, vol.Range(min=0)),
        vol.Optional(
            const.OPTION_SLOT_STRIDE_MINUTES,
            default=const.DEFAULT_SLOT_STRIDE_MINUTES,
        ): vol.All(int, vol.Range(min=1)),
        vol.Optional(
            const.OPTION_FAIRNESS_COST_WEIGHT, default=const.FAIRNESS_COST_WEIGHT
        ): vol.All(vol.Coerce(float), _finite, vol.Range(min=0)),
        vol.Optional(
            const.OPTION_OFF_WINDOW_PENALTY, default=const.OFF_WINDOW_PENALTY
        ): vol.All(vol.Coerce(float), _finite, vol.Range(min=0)),
        vol.Optional(
            const.OPTION_TIME_ZONE, default=const.DEFAULT_TIME_ZONE_NAME
        ): _NON_EMPTY_STRING,
    }
)


# =============================================================================
# Validation Entry Points
# =============================================================================


def validate_options(options: EngineOptions | None) -> dict[str, Any]:
    """Validate engine options and fill in defaults.

    Raises:
        ScheduleConfigError: On unknown keys, out-of-range values, or an
            unknown time zone.
    """
    try:
        validated: dict[str, Any] = OPTIONS_SCHEMA(dict(options or {}))
    except vol.Invalid as err:
        raise ScheduleConfigError(
            const.ERROR_INVALID_OPTIONS_FMT.format(error=err)
        ) from err

    try:
        resolve_time_zone(validated[const.OPTION_TIME_ZONE])
    except KeyError as err:
        raise ScheduleConfigError(
            const.ERROR_UNKNOWN_TIME_ZONE_FMT.format(
                time_zone=validated[const.OPTION_TIME_ZONE]
            )
        ) from err
    return validated


def validate_task(task: dict[str, Any]) -> dict[str, Any]:
    """Validate one task definition, naming the task in the error."""
    try:
        return TASK_SCHEMA(task)
    except vol.Invalid as err:
        name = task.get(const.DATA_TASK_NAME, "?") if isinstance(task, dict) else "?"
        task_id = task.get(const.DATA_TASK_ID) if isinstance(task, dict) else None
        raise ScheduleConfigError(
            f"Task '{name}' is invalid: {err}", task_id=task_id
        ) from err


def validate_member(member: dict[str, Any]) -> dict[str, Any]:
    """Validate one member record."""
    try:
        return MEMBER_SCHEMA(member)
    except vol.Invalid as err:
        member_id = member.get(const.DATA_MEMBER_ID, "?")
        raise ScheduleConfigError(f"Member '{member_id}' is invalid: {err}") from err


def validate_context(
    context: SchedulingContext | dict[str, Any], tz: ZoneInfo | None = None
) -> dict[str, Any]:
    """Validate and normalize a scheduling context.

    Returns a new dict; the caller's context is never modified. week_start is
    reduced to a `date` in `tz`.

    Raises:
        ScheduleConfigError: If the context is malformed.
    """
    try:
        validated: dict[str, Any] = CONTEXT_SCHEMA(dict(context))
    except vol.Invalid as err:
        raise ScheduleConfigError(
            const.ERROR_INVALID_CONTEXT_FMT.format(error=err)
        ) from err

    raw_week_start = validated[const.CONTEXT_WEEK_START]
    if isinstance(raw_week_start, str):
        raw_week_start = dt_parse(raw_week_start, tz)
    week_start = dt_to_date(raw_week_start, tz)
    if week_start.weekday() != const.WEEK_START_WEEKDAY:
        raise ScheduleConfigError(
            const.ERROR_WEEK_START_NOT_MONDAY_FMT.format(
                week_start=week_start.isoformat()
            )
        )
    validated[const.CONTEXT_WEEK_START] = week_start

    validated[const.CONTEXT_TASKS] = [
        validate_task(task) for task in validated[const.CONTEXT_TASKS]
    ]
    validated[const.CONTEXT_MEMBERS] = [
        validate_member(member) for member in validated[const.CONTEXT_MEMBERS]
    ]

    seen_ids: set[str] = set()
    for member in validated[const.CONTEXT_MEMBERS]:
        member_id = member[const.DATA_MEMBER_ID]
        if member_id in seen_ids:
            raise ScheduleConfigError(
                const.ERROR_DUPLICATE_MEMBER_FMT.format(member_id=member_id)
            )
        seen_ids.add(member_id)

    active_count = sum(
        1 for task in validated[const.CONTEXT_TASKS] if task[const.DATA_TASK_ACTIVE]
    )
    if active_count and not validated[const.CONTEXT_MEMBERS]:
        raise ScheduleConfigError(
            const.ERROR_NO_MEMBERS_FMT.format(count=active_count)
        )

    return validated
