# File: utils/dt_utils.py
"""Date and time utilities for ChorePlanner.

Pure Python date/time functions shared by all engines.
Uses standard library: datetime, zoneinfo.

Functions:
    - set_default_timezone / get_default_timezone: Engine time zone
    - resolve_time_zone: Look up an IANA zone by name
    - as_local: Time zone conversion
    - start_of_local_day: Midnight of a datetime's local date
    - dt_parse: Normalize str/date/datetime inputs to aware datetimes
    - dt_to_date: Reduce date/datetime inputs to a date
    - parse_time_of_day: Parse "HH:MM" strings
    - time_of_day_minutes: Minutes since midnight for "HH:MM"
    - bind_time_to_date: Combine a date and "HH:MM" into an aware UTC datetime
    - add_minutes: Shift a datetime by minutes
    - intervals_overlap / interval_within: Half-open interval tests
    - iter_slot_starts: Candidate start times inside a window
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime, time, timedelta
import logging
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

_TIME_OF_DAY_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone used when binding windows to dates.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


def resolve_time_zone(name: str | None) -> ZoneInfo:
    """Return the ZoneInfo for an IANA name, or the default zone for None.

    Raises:
        ZoneInfoNotFoundError: If the name is not a known zone.
    """
    if not name:
        return DEFAULT_TIME_ZONE
    try:
        return ZoneInfo(name)
    except (ValueError, ZoneInfoNotFoundError) as err:
        raise ZoneInfoNotFoundError(name) from err


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive values are assumed UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the start of day (00:00:00) for a datetime in local timezone.

    Args:
        dt_obj: Datetime object (can be in any timezone)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    local_dt = as_local(dt_obj, tz_info)
    return datetime.combine(local_dt.date(), time.min, tzinfo=tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize various datetime input formats to an aware UTC datetime.

    Accepts ISO strings ("2025-10-06T09:00:00Z", "2025-10-06"), date objects
    (midnight), and datetime objects. Naive values are interpreted in
    `default_tzinfo` (DEFAULT_TIME_ZONE if None).

    Returns:
        Aware datetime in UTC, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-10-06T09:00:00Z")
        datetime.datetime(2025, 10, 6, 9, 0, tzinfo=datetime.timezone.utc)
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input.strip())
        except ValueError:
            _LOGGER.debug("Unparseable datetime string: %s", dt_input)
            return None
    elif isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, time.min)
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)

    return result.astimezone(UTC)


def dt_to_date(value: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Reduce a date or datetime to a calendar date.

    Aware datetimes are converted to `tz` (DEFAULT_TIME_ZONE if None) first,
    so a week start given as "2025-10-06T00:00:00Z" stays on Oct 6 in UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return as_local(value, tz).date()
    return value


def parse_time_of_day(value: str | None) -> time | None:
    """Parse an "HH:MM" string into a `datetime.time`.

    Returns:
        time object, or None if the string is not a valid HH:MM value.

    Examples:
        parse_time_of_day("09:30") → time(9, 30)
        parse_time_of_day("7:05") → time(7, 5)
        parse_time_of_day("24:00") → None
    """
    if not value or not isinstance(value, str):
        return None

    match = _TIME_OF_DAY_RE.match(value.strip())
    if not match:
        return None
    return time(int(match.group(1)), int(match.group(2)))


def time_of_day_minutes(value: str) -> int:
    """Return minutes since midnight for an "HH:MM" string.

    Raises:
        ValueError: If the string is not a valid HH:MM value.
    """
    parsed = parse_time_of_day(value)
    if parsed is None:
        raise ValueError(f"Invalid time of day: {value!r}")
    return parsed.hour * 60 + parsed.minute


def bind_time_to_date(
    day: date, time_of_day: str, tz: ZoneInfo | None = None
) -> datetime:
    """Combine a date and an "HH:MM" string into an aware UTC datetime.

    The wall-clock time is interpreted in `tz` (DEFAULT_TIME_ZONE if None).

    Raises:
        ValueError: If the string is not a valid HH:MM value.
    """
    parsed = parse_time_of_day(time_of_day)
    if parsed is None:
        raise ValueError(f"Invalid time of day: {time_of_day!r}")
    local_dt = datetime.combine(day, parsed, tzinfo=tz or DEFAULT_TIME_ZONE)
    return local_dt.astimezone(UTC)


# ==============================================================================
# Interval Arithmetic
# ==============================================================================


def add_minutes(dt_obj: datetime, minutes: float) -> datetime:
    """Shift a datetime by a (possibly negative) number of minutes."""
    return dt_obj + timedelta(minutes=minutes)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Return True if half-open intervals [start_a, end_a) and [start_b, end_b) intersect."""
    return start_a < end_b and end_a > start_b


def interval_within(
    start: datetime, end: datetime, outer_start: datetime, outer_end: datetime
) -> bool:
    """Return True if [start, end) lies fully inside [outer_start, outer_end]."""
    return start >= outer_start and end <= outer_end


def iter_slot_starts(
    window_start: datetime,
    window_end: datetime,
    duration_min: int,
    stride_min: int,
) -> Iterator[datetime]:
    """Yield candidate start times inside a window.

    Starts at `window_start` and advances by `stride_min` while a slot of
    `duration_min` still ends at or before `window_end`.

    Example:
        09:00-10:00, 30 min, stride 15 → 09:00, 09:15, 09:30
    """
    if stride_min <= 0:
        raise ValueError("stride_min must be positive")

    duration = timedelta(minutes=duration_min)
    stride = timedelta(minutes=stride_min)
    current = window_start
    while current + duration <= window_end:
        yield current
        current += stride
