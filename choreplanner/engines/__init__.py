"""Engine modules for ChorePlanner.

Contains specialized computation engines:
- occurrence_engine: Recurring task expansion and priority
- availability_engine: Member availability model and busy-time checks
- constraint_engine: Eligibility predicate
- cost_engine: Placement cost function
- assignment_engine: Greedy weekly schedule search
- fairness_engine: Rolling workload scores from prior weeks
"""

from .assignment_engine import (
    AssignmentCandidate,
    AssignmentEngine,
    SchedulingResult,
    SchedulingRun,
    generate_schedule,
)
from .availability_engine import (
    AvailabilityEngine,
    BusyPeriod,
    MemberAvailability,
    build_member_availability,
    is_available,
)
from .constraint_engine import ConstraintEngine, TaskConstraints, satisfies_constraints
from .cost_engine import CostEngine, calculate_assignment_cost
from .fairness_engine import FairnessEngine, calculate_fairness_history
from .occurrence_engine import (
    OccurrenceEngine,
    TaskInstance,
    TimeWindow,
    expand_tasks_for_week,
)

__all__ = [
    "AssignmentCandidate",
    "AssignmentEngine",
    "AvailabilityEngine",
    "BusyPeriod",
    "ConstraintEngine",
    "CostEngine",
    "FairnessEngine",
    "MemberAvailability",
    "OccurrenceEngine",
    "SchedulingResult",
    "SchedulingRun",
    "TaskConstraints",
    "TaskInstance",
    "TimeWindow",
    "build_member_availability",
    "calculate_assignment_cost",
    "calculate_fairness_history",
    "expand_tasks_for_week",
    "generate_schedule",
    "is_available",
    "satisfies_constraints",
]
