"""Availability Engine - Member availability model and busy-time checks.

Builds one MemberAvailability per household member from storage records,
normalized calendar events and the rolling fairness history. This is the only
place where loosely-typed storage data (capability/allergy payloads, calendar
timestamps) is coerced; everything downstream assumes well-typed values.

Calendar handling:
    - Events with busy=False and all_day=False are free time and ignored.
    - all_day events block whole days, from 00:00 of the start date to 00:00
      after the last covered date, in the engine time zone.
    - Events that cannot be parsed are logged and skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.coerce_utils import coerce_string_set
from ..utils.dt_utils import add_minutes, dt_parse, intervals_overlap, start_of_local_day

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..type_defs import CalendarEventData, MemberData


@dataclass(frozen=True)
class BusyPeriod:
    """Absolute interval [start, end) during which a member is unavailable."""

    start: datetime
    end: datetime

    def as_dict(self) -> dict[str, str]:
        """Return ISO-formatted bounds."""
        return {
            const.DATA_EVENT_START: self.start.isoformat(),
            const.DATA_EVENT_END: self.end.isoformat(),
        }


@dataclass(frozen=True)
class MemberAvailability:
    """Availability model of one household member.

    Attributes:
        member_id: Household membership id (rotation rosters refer to it)
        user_id: Account id (calendars and fairness history are keyed by it)
        capabilities: Normalized capability set
        allergies: Normalized allergy set
        age: Age in years, or None if unknown
        busy_periods: Calendar busy time plus assignments committed this run
        fairness_score: Accumulated weighted workload
    """

    member_id: str
    user_id: str
    capabilities: frozenset[str] = frozenset()
    allergies: frozenset[str] = frozenset()
    age: int | None = None
    busy_periods: tuple[BusyPeriod, ...] = field(default_factory=tuple)
    fairness_score: float = 0.0


class AvailabilityEngine:
    """Builds member availability and answers "is this slot free?".

    The engine holds only the time zone used to expand all-day events.
    """

    def __init__(self, tz: ZoneInfo | None = None) -> None:
        """Initialize the engine.

        Args:
            tz: Time zone that defines calendar days for all-day events.
                Defaults to the dt_utils default time zone.
        """
        self._tz = tz

    def build_member_availability(
        self,
        members: Iterable[MemberData],
        calendar_events: Mapping[str, Iterable[CalendarEventData] | None]
        | None = None,
        fairness_history: Mapping[str, float] | None = None,
    ) -> list[MemberAvailability]:
        """Build the availability model for every member.

        Args:
            members: Member records from storage
            calendar_events: user_id -> normalized calendar events
            fairness_history: user_id -> rolling workload score

        Returns:
            One MemberAvailability per member, in input order
        """
        calendar_events = calendar_events or {}
        fairness_history = fairness_history or {}
        result: list[MemberAvailability] = []

        for member in members:
            user_id = member[const.DATA_MEMBER_USER_ID]
            busy_periods = self.build_busy_periods(calendar_events.get(user_id) or [])
            result.append(
                MemberAvailability(
                    member_id=member[const.DATA_MEMBER_ID],
                    user_id=user_id,
                    capabilities=coerce_string_set(
                        member.get(const.DATA_MEMBER_CAPABILITIES),
                        const.DATA_MEMBER_CAPABILITIES,
                    ),
                    allergies=coerce_string_set(
                        member.get(const.DATA_MEMBER_ALLERGIES),
                        const.DATA_MEMBER_ALLERGIES,
                    ),
                    age=self._coerce_age(member.get(const.DATA_MEMBER_AGE)),
                    busy_periods=tuple(busy_periods),
                    fairness_score=float(fairness_history.get(user_id) or 0),
                )
            )
            const.LOGGER.debug(
                "AvailabilityEngine: Member %s has %d busy period(s), score %s",
                user_id,
                len(busy_periods),
                result[-1].fairness_score,
            )

        return result

    def build_busy_periods(
        self, events: Iterable[CalendarEventData]
    ) -> list[BusyPeriod]:
        """Convert normalized calendar events into busy periods.

        Returns:
            Busy periods sorted by start time
        """
        periods: list[BusyPeriod] = []
        for event in events:
            period = self._event_to_period(event)
            if period is not None:
                periods.append(period)
        periods.sort(key=lambda p: (p.start, p.end))
        return periods

    @staticmethod
    def is_available(
        member: MemberAvailability,
        start: datetime,
        end: datetime,
        buffer_minutes: int = const.DEFAULT_BUFFER_MINUTES,
    ) -> bool:
        """Check if a member is free during [start, end).

        A busy period blocks [busy.start - buffer, busy.end + buffer).

        Args:
            member: Member availability (busy periods include this run's
                committed assignments)
            start: Slot start
            end: Slot end
            buffer_minutes: Minutes kept free around every busy period

        Returns:
            True if no busy period (plus buffer) intersects the slot
        """
        for busy in member.busy_periods:
            if intervals_overlap(
                start,
                end,
                add_minutes(busy.start, -buffer_minutes),
                add_minutes(busy.end, buffer_minutes),
            ):
                return False
        return True

    # =========================================================================
    # Private helpers
    # =========================================================================

    def _event_to_period(self, event: Mapping[str, Any]) -> BusyPeriod | None:
        """Turn one calendar event into a busy period, or None to skip it."""
        if not isinstance(event, Mapping):
            const.LOGGER.warning(
                "AvailabilityEngine: Ignoring malformed calendar event %r", event
            )
            return None

        all_day = bool(event.get(const.DATA_EVENT_ALL_DAY, False))
        busy = bool(event.get(const.DATA_EVENT_BUSY, True))
        if not busy and not all_day:
            return None

        start = dt_parse(event.get(const.DATA_EVENT_START), self._tz)
        end = dt_parse(event.get(const.DATA_EVENT_END), self._tz)
        if start is None or end is None:
            const.LOGGER.warning(
                "AvailabilityEngine: Ignoring calendar event %s with unparseable "
                "bounds (%s - %s)",
                event.get(const.DATA_EVENT_ID),
                event.get(const.DATA_EVENT_START),
                event.get(const.DATA_EVENT_END),
            )
            return None

        if all_day:
            day_start = start_of_local_day(start, self._tz)
            # An all-day end at local midnight is exclusive; otherwise cover its day
            end_day = start_of_local_day(end, self._tz)
            if end_day < end or end_day <= day_start:
                end_day += timedelta(days=1)
            return BusyPeriod(start=day_start, end=end_day)

        if end <= start:
            const.LOGGER.warning(
                "AvailabilityEngine: Ignoring calendar event %s ending before it "
                "starts",
                event.get(const.DATA_EVENT_ID),
            )
            return None

        return BusyPeriod(start=start, end=end)

    @staticmethod
    def _coerce_age(raw_age: Any) -> int | None:
        if isinstance(raw_age, bool):
            return None
        if isinstance(raw_age, int):
            return raw_age
        if isinstance(raw_age, str) and raw_age.strip().isdigit():
            return int(raw_age.strip())
        return None


is_available = AvailabilityEngine.is_available


def build_member_availability(
    members: Iterable[MemberData],
    calendar_events: Mapping[str, Iterable[CalendarEventData] | None] | None = None,
    fairness_history: Mapping[str, float] | None = None,
    tz: ZoneInfo | None = None,
) -> list[MemberAvailability]:
    """Build member availability without keeping an engine instance."""
    return AvailabilityEngine(tz).build_member_availability(
        members, calendar_events, fairness_history
    )
