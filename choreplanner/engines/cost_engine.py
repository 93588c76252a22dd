"""Cost Engine - Score a (task instance, member, start time) placement.

Lower cost is better. math.inf marks an infeasible placement:

    1. constraints not satisfied              → inf
    2. member busy during [start, end)        → inf (buffer applied)
    3. otherwise fairness_score * 10
              + 50 if the slot is outside every preferred window

Fairness dominates so the least-loaded eligible member wins; the window
penalty only separates on-time from off-window slots.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import add_minutes
from .availability_engine import AvailabilityEngine
from .constraint_engine import ConstraintEngine

if TYPE_CHECKING:
    from datetime import datetime

    from .availability_engine import MemberAvailability
    from .occurrence_engine import TaskInstance


class CostEngine:
    """Pure cost function with configurable weights.

    Args:
        buffer_minutes: Minutes kept free around busy periods
        fairness_cost_weight: Cost per point of fairness score
        off_window_penalty: Flat cost for slots outside preferred windows
    """

    def __init__(
        self,
        buffer_minutes: int = const.DEFAULT_BUFFER_MINUTES,
        fairness_cost_weight: float = const.FAIRNESS_COST_WEIGHT,
        off_window_penalty: float = const.OFF_WINDOW_PENALTY,
    ) -> None:
        self.buffer_minutes = buffer_minutes
        self.fairness_cost_weight = fairness_cost_weight
        self.off_window_penalty = off_window_penalty

    def calculate_assignment_cost(
        self,
        task_instance: TaskInstance,
        member: MemberAvailability,
        start_time: datetime,
    ) -> float:
        """Calculate the cost of starting task_instance at start_time for member.

        Returns:
            Finite cost, or math.inf if the placement is infeasible
        """
        if not ConstraintEngine.satisfies_constraints(
            member, task_instance.constraints
        ):
            return math.inf

        end_time = add_minutes(start_time, task_instance.duration_min)
        if not AvailabilityEngine.is_available(
            member, start_time, end_time, self.buffer_minutes
        ):
            return math.inf

        cost = member.fairness_score * self.fairness_cost_weight

        if not any(
            window.contains(start_time, end_time)
            for window in task_instance.preferred_windows
        ):
            cost += self.off_window_penalty

        return cost


def calculate_assignment_cost(
    task_instance: TaskInstance,
    member: MemberAvailability,
    start_time: datetime,
) -> float:
    """Calculate placement cost with the default weights."""
    return CostEngine().calculate_assignment_cost(task_instance, member, start_time)
