"""Unit tests for availability_engine.py.

Test Categories:
- Member model construction (coercion of capabilities, allergies, age)
- Calendar event normalization (busy, free, all-day, malformed)
- is_available buffer semantics
"""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from choreplanner.engines.availability_engine import (
    AvailabilityEngine,
    build_member_availability,
    is_available,
)
from tests.helpers import make_availability, make_member, utc

# =============================================================================
# Member model
# =============================================================================


class TestBuildMemberAvailability:
    """One MemberAvailability per member record, in input order."""

    def test_basic_fields(self) -> None:
        """Ids, capability and allergy sets, score and age are carried over."""
        members = [
            make_member(
                member_id="m-1",
                user_id="u-1",
                capabilities=["adult_only", "can_drive"],
                allergies=["dust"],
                age=40,
            ),
            make_member(member_id="m-2", user_id="u-2"),
        ]

        result = build_member_availability(members, {}, {"u-1": 120})

        assert [m.member_id for m in result] == ["m-1", "m-2"]
        first = result[0]
        assert first.user_id == "u-1"
        assert first.capabilities == frozenset({"adult_only", "can_drive"})
        assert first.allergies == frozenset({"dust"})
        assert first.age == 40
        assert first.fairness_score == 120.0
        assert result[1].fairness_score == 0.0
        assert result[1].age is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('["adult_only"]', {"adult_only"}),
            ("adult_only, can_cook", {"adult_only", "can_cook"}),
            ({"not": "a list"}, set()),
            ("[broken", set()),
            (None, set()),
        ],
    )
    def test_capabilities_coerced(self, raw: object, expected: set[str]) -> None:
        """Malformed capability payloads degrade to an empty set."""
        member = make_member()
        member["capabilities"] = raw

        result = build_member_availability([member])

        assert result[0].capabilities == frozenset(expected)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(12, 12), ("14", 14), ("teen", None), (True, None), (None, None)],
    )
    def test_age_coerced(self, raw: object, expected: int | None) -> None:
        """Only integer-like ages survive."""
        member = make_member()
        member["age"] = raw

        assert build_member_availability([member])[0].age == expected

    def test_missing_calendar_means_free(self) -> None:
        """Members without a calendar entry have no busy periods."""
        result = build_member_availability([make_member()], {"other": []})

        assert result[0].busy_periods == ()


# =============================================================================
# Calendar events
# =============================================================================


class TestBusyPeriods:
    """Calendar events become sorted absolute busy periods."""

    def test_busy_event(self) -> None:
        """A timed busy event keeps its bounds."""
        periods = AvailabilityEngine().build_busy_periods(
            [
                {
                    "id": "e1",
                    "start": "2025-10-06T09:00:00Z",
                    "end": "2025-10-06T10:00:00Z",
                    "busy": True,
                    "all_day": False,
                }
            ]
        )

        assert [(p.start, p.end) for p in periods] == [
            (utc(2025, 10, 6, 9), utc(2025, 10, 6, 10))
        ]

    def test_busy_defaults_to_true(self) -> None:
        """Events without a busy flag block time."""
        periods = AvailabilityEngine().build_busy_periods(
            [{"start": "2025-10-06T09:00:00Z", "end": "2025-10-06T09:15:00Z"}]
        )

        assert len(periods) == 1

    def test_free_event_ignored(self) -> None:
        """busy=False and all_day=False is free time."""
        periods = AvailabilityEngine().build_busy_periods(
            [
                {
                    "start": "2025-10-06T09:00:00Z",
                    "end": "2025-10-06T10:00:00Z",
                    "busy": False,
                    "all_day": False,
                }
            ]
        )

        assert periods == []

    def test_sorted_by_start(self) -> None:
        """Periods come back in start order."""
        periods = AvailabilityEngine().build_busy_periods(
            [
                {"start": "2025-10-07T09:00:00Z", "end": "2025-10-07T10:00:00Z"},
                {"start": "2025-10-06T09:00:00Z", "end": "2025-10-06T10:00:00Z"},
            ]
        )

        assert [p.start for p in periods] == [
            utc(2025, 10, 6, 9),
            utc(2025, 10, 7, 9),
        ]

    def test_all_day_single_day(self) -> None:
        """An all-day event ending at next midnight covers one day."""
        periods = AvailabilityEngine().build_busy_periods(
            [
                {
                    "start": "2025-10-07",
                    "end": "2025-10-08",
                    "busy": False,
                    "all_day": True,
                }
            ]
        )

        assert [(p.start, p.end) for p in periods] == [
            (utc(2025, 10, 7), utc(2025, 10, 8))
        ]

    def test_all_day_same_start_and_end(self) -> None:
        """start == end still blocks the whole day."""
        periods = AvailabilityEngine().build_busy_periods(
            [{"start": "2025-10-07", "end": "2025-10-07", "all_day": True}]
        )

        assert [(p.start, p.end) for p in periods] == [
            (utc(2025, 10, 7), utc(2025, 10, 8))
        ]

    def test_all_day_multi_day(self) -> None:
        """A partial end day is covered to its midnight."""
        periods = AvailabilityEngine().build_busy_periods(
            [
                {
                    "start": "2025-10-07T08:00:00Z",
                    "end": "2025-10-09T12:00:00Z",
                    "all_day": True,
                }
            ]
        )

        assert [(p.start, p.end) for p in periods] == [
            (utc(2025, 10, 7), utc(2025, 10, 10))
        ]

    def test_all_day_in_local_zone(self) -> None:
        """All-day bounds follow local midnight."""
        periods = AvailabilityEngine(ZoneInfo("Europe/Berlin")).build_busy_periods(
            [{"start": "2025-10-07", "end": "2025-10-08", "all_day": True}]
        )

        assert [(p.start, p.end) for p in periods] == [
            (utc(2025, 10, 6, 22), utc(2025, 10, 7, 22))
        ]

    @pytest.mark.parametrize(
        "event",
        [
            {"start": "not a date", "end": "2025-10-06T10:00:00Z"},
            {"start": "2025-10-06T09:00:00Z"},
            {"start": "2025-10-06T10:00:00Z", "end": "2025-10-06T09:00:00Z"},
            "garbage",
        ],
    )
    def test_malformed_events_skipped(
        self, event: object, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Unusable events are logged and dropped."""
        periods = AvailabilityEngine().build_busy_periods([event])

        assert periods == []
        assert "AvailabilityEngine: Ignoring" in caplog.text


# =============================================================================
# is_available
# =============================================================================


class TestIsAvailable:
    """Busy periods block [start - buffer, end + buffer)."""

    @pytest.fixture
    def busy_member(self):
        """Member busy 09:00-10:00 on Monday."""
        return make_availability(busy=[(utc(2025, 10, 6, 9), utc(2025, 10, 6, 10))])

    def test_no_busy_periods(self) -> None:
        """A free member is always available."""
        member = make_availability()

        assert is_available(member, utc(2025, 10, 6, 9), utc(2025, 10, 6, 10))

    def test_overlap_rejected(self, busy_member) -> None:
        """Direct overlap is rejected."""
        assert not is_available(
            busy_member, utc(2025, 10, 6, 9, 30), utc(2025, 10, 6, 10, 30)
        )

    def test_inside_buffer_rejected(self, busy_member) -> None:
        """Ending 10 minutes before the busy start violates the buffer."""
        assert not is_available(
            busy_member, utc(2025, 10, 6, 8, 20), utc(2025, 10, 6, 8, 50)
        )

    def test_touching_buffer_edge_allowed(self, busy_member) -> None:
        """Ending exactly at busy.start - 15 is allowed."""
        assert is_available(
            busy_member, utc(2025, 10, 6, 8, 15), utc(2025, 10, 6, 8, 45)
        )
        assert is_available(
            busy_member, utc(2025, 10, 6, 10, 15), utc(2025, 10, 6, 10, 45)
        )

    def test_custom_buffer(self, busy_member) -> None:
        """A zero buffer allows back-to-back slots."""
        assert is_available(
            busy_member,
            utc(2025, 10, 6, 10),
            utc(2025, 10, 6, 10, 30),
            buffer_minutes=0,
        )
        assert not is_available(
            busy_member,
            utc(2025, 10, 6, 10),
            utc(2025, 10, 6, 10, 30),
        )
