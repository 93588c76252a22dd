"""Assignment Engine - Greedy weekly schedule search.

Single linear pass over task instances in priority order. For each instance
every eligible member and every candidate start time (fixed stride inside each
preferred window) is scored by the cost engine; the lowest finite cost wins
and is committed before the next instance is considered.

Determinism:
    - Instances arrive sorted by (priority desc, task_id, occurrence_date).
    - Members are tried in ascending member_id order, windows in instance
      order, start times ascending.
    - A candidate replaces the current best only if strictly cheaper, so the
      first-found candidate wins ties.

Run state (running fairness scores and the occupied-slot ledger) lives in a
SchedulingRun owned by one generate_schedule() call. Nothing is shared
between runs, so different households can be scheduled concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import add_minutes, iter_slot_starts, resolve_time_zone
from ..validation import validate_context, validate_options
from .availability_engine import AvailabilityEngine, BusyPeriod, MemberAvailability
from .cost_engine import CostEngine
from .occurrence_engine import OccurrenceEngine, TaskInstance

if TYPE_CHECKING:
    from datetime import datetime

    from ..type_defs import EngineOptions, SchedulingContext


# =============================================================================
# RESULT DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True)
class AssignmentCandidate:
    """A feasible placement of one task instance.

    Attributes:
        task_instance: The placed instance
        member_id: Household membership id of the assignee
        user_id: Account id of the assignee
        start_at: Slot start (aware UTC)
        end_at: Slot end (start_at + duration)
        cost: Finite placement cost
    """

    task_instance: TaskInstance
    member_id: str
    user_id: str
    start_at: datetime
    end_at: datetime
    cost: float

    def as_dict(self) -> dict[str, Any]:
        """Return the assignment row the persistence layer stores."""
        return {
            const.DATA_TASK_ID: self.task_instance.task_id,
            const.DATA_TASK_NAME: self.task_instance.name,
            "member_id": self.member_id,
            const.DATA_MEMBER_USER_ID: self.user_id,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat(),
            "cost": self.cost,
            "status": const.ASSIGNMENT_STATUS_PENDING,
        }


@dataclass
class SchedulingResult:
    """Outcome of one scheduling run.

    Attributes:
        assignments: One entry per placed instance, in placement order
        unassigned: Instances with no feasible placement
        conflicts: Human readable diagnostics, one per unassigned instance
    """

    assignments: list[AssignmentCandidate] = field(default_factory=list)
    unassigned: list[TaskInstance] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """Return counts and conflicts for plan status reporting."""
        return {
            "assignments_count": len(self.assignments),
            "unassigned_count": len(self.unassigned),
            "conflicts": list(self.conflicts),
        }

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation of the whole result."""
        return {
            "assignments": [a.as_dict() for a in self.assignments],
            "unassigned": [i.as_dict() for i in self.unassigned],
            "conflicts": list(self.conflicts),
        }


# =============================================================================
# RUN STATE
# =============================================================================


@dataclass
class SchedulingRun:
    """Mutable state of a single scheduling pass.

    Attributes:
        members: Availability snapshots sorted by member_id
        fairness_scores: member_id -> running fairness score
        occupied_slots: member_id -> calendar busy periods plus commitments
    """

    members: list[MemberAvailability]
    fairness_scores: dict[str, float]
    occupied_slots: dict[str, list[BusyPeriod]]

    @classmethod
    def start(cls, members: list[MemberAvailability]) -> SchedulingRun:
        """Seed run state from the initial availability model."""
        ordered = sorted(members, key=lambda m: m.member_id)
        return cls(
            members=ordered,
            fairness_scores={m.member_id: m.fairness_score for m in ordered},
            occupied_slots={m.member_id: list(m.busy_periods) for m in ordered},
        )

    def eligible_members(self, instance: TaskInstance) -> list[MemberAvailability]:
        """Return the member pool for an instance (rotation roster or everyone)."""
        if not instance.rotation_roster:
            return list(self.members)
        roster = set(instance.rotation_roster)
        return [m for m in self.members if m.member_id in roster]

    def current_view(self, member: MemberAvailability) -> MemberAvailability:
        """Return the member with this run's score and occupied slots applied."""
        return replace(
            member,
            fairness_score=self.fairness_scores[member.member_id],
            busy_periods=tuple(self.occupied_slots[member.member_id]),
        )

    def commit(self, candidate: AssignmentCandidate) -> None:
        """Record a placement: grow the member's score and block the slot."""
        instance = candidate.task_instance
        self.fairness_scores[candidate.member_id] += (
            instance.duration_min * instance.fairness_weight
        )
        self.occupied_slots[candidate.member_id].append(
            BusyPeriod(start=candidate.start_at, end=candidate.end_at)
        )


# =============================================================================
# ASSIGNMENT ENGINE
# =============================================================================


class AssignmentEngine:
    """Greedy scheduler for one household week.

    Options are validated once at construction; the same engine can run any
    number of independent contexts.
    """

    def __init__(self, options: EngineOptions | None = None) -> None:
        """Initialize the engine.

        Args:
            options: Optional overrides of the const.py tuning defaults

        Raises:
            ScheduleConfigError: If options are invalid.
        """
        self._options = validate_options(options)
        self._tz = resolve_time_zone(self._options[const.OPTION_TIME_ZONE])
        self._stride = self._options[const.OPTION_SLOT_STRIDE_MINUTES]
        self._cost_engine = CostEngine(
            buffer_minutes=self._options[const.OPTION_BUFFER_MINUTES],
            fairness_cost_weight=self._options[const.OPTION_FAIRNESS_COST_WEIGHT],
            off_window_penalty=self._options[const.OPTION_OFF_WINDOW_PENALTY],
        )

    def generate_schedule(
        self, context: SchedulingContext | dict[str, Any]
    ) -> SchedulingResult:
        """Generate the weekly assignment set for one household.

        Args:
            context: week_start, tasks, members, calendar_events,
                fairness_history

        Returns:
            SchedulingResult with assignments, unassigned instances and
            conflict messages

        Raises:
            ScheduleConfigError: If the context is malformed.
        """
        validated = validate_context(context, self._tz)

        instances = OccurrenceEngine(self._tz).expand_tasks_for_week(
            validated[const.CONTEXT_TASKS], validated[const.CONTEXT_WEEK_START]
        )
        availability = AvailabilityEngine(self._tz).build_member_availability(
            validated[const.CONTEXT_MEMBERS],
            validated[const.CONTEXT_CALENDAR_EVENTS],
            validated[const.CONTEXT_FAIRNESS_HISTORY],
        )

        result = SchedulingResult()
        if not instances:
            const.LOGGER.debug("AssignmentEngine: No task instances to schedule")
            return result

        run = SchedulingRun.start(availability)

        for instance in instances:
            candidate = self.find_best_assignment(instance, run)
            if candidate is not None:
                result.assignments.append(candidate)
                run.commit(candidate)
                continue

            result.unassigned.append(instance)
            result.conflicts.append(
                const.CONFLICT_NO_SLOT_FMT.format(
                    name=instance.name, date=instance.occurrence_date.isoformat()
                )
            )
            const.LOGGER.debug(
                "AssignmentEngine: No feasible slot for %s on %s",
                instance.task_id,
                instance.occurrence_date,
            )

        const.LOGGER.info(
            "AssignmentEngine: Week of %s scheduled %d of %d instance(s), "
            "%d unassigned",
            validated[const.CONTEXT_WEEK_START].isoformat(),
            len(result.assignments),
            len(instances),
            len(result.unassigned),
        )
        return result

    def find_best_assignment(
        self, instance: TaskInstance, run: SchedulingRun
    ) -> AssignmentCandidate | None:
        """Find the lowest-cost member and start time for one instance.

        Returns:
            The best feasible candidate, or None if every candidate is
            infeasible
        """
        best: AssignmentCandidate | None = None
        lowest_cost = math.inf

        for member in run.eligible_members(instance):
            view = run.current_view(member)
            for window in instance.preferred_windows:
                for start in iter_slot_starts(
                    window.start, window.end, instance.duration_min, self._stride
                ):
                    cost = self._cost_engine.calculate_assignment_cost(
                        instance, view, start
                    )
                    if cost < lowest_cost:
                        lowest_cost = cost
                        best = self._candidate(instance, view, start, cost)

        return best

    @staticmethod
    def _candidate(
        instance: TaskInstance,
        member: MemberAvailability,
        start: datetime,
        cost: float,
    ) -> AssignmentCandidate:
        return AssignmentCandidate(
            task_instance=instance,
            member_id=member.member_id,
            user_id=member.user_id,
            start_at=start,
            end_at=add_minutes(start, instance.duration_min),
            cost=cost,
        )


def generate_schedule(
    context: SchedulingContext | dict[str, Any],
    options: EngineOptions | None = None,
) -> SchedulingResult:
    """Generate a weekly schedule with a fresh AssignmentEngine."""
    return AssignmentEngine(options).generate_schedule(context)
