"""ChorePlanner - fair weekly assignment of recurring household chores.

The engine is pure computation: callers hand in task definitions, members,
normalized calendar busy periods and fairness history, and receive a
SchedulingResult. Persistence, calendar sync and notifications belong to the
surrounding application.

Usage:
    from choreplanner import generate_schedule

    result = generate_schedule(
        {
            "week_start": date(2025, 10, 6),
            "tasks": tasks,
            "members": members,
            "calendar_events": events_by_user,
            "fairness_history": scores_by_user,
        }
    )
"""

from .engines import (
    AssignmentCandidate,
    AssignmentEngine,
    MemberAvailability,
    SchedulingResult,
    TaskInstance,
    build_member_availability,
    calculate_assignment_cost,
    calculate_fairness_history,
    expand_tasks_for_week,
    generate_schedule,
    is_available,
    satisfies_constraints,
)
from .exceptions import ChorePlannerError, ScheduleConfigError

__all__ = [
    "AssignmentCandidate",
    "AssignmentEngine",
    "ChorePlannerError",
    "MemberAvailability",
    "ScheduleConfigError",
    "SchedulingResult",
    "TaskInstance",
    "build_member_availability",
    "calculate_assignment_cost",
    "calculate_fairness_history",
    "expand_tasks_for_week",
    "generate_schedule",
    "is_available",
    "satisfies_constraints",
]
