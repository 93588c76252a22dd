"""Exceptions raised by the ChorePlanner engines.

Infeasible placements are never raised; they are reported through
SchedulingResult.unassigned and SchedulingResult.conflicts. Only caller input
problems surface as exceptions.
"""

from __future__ import annotations


class ChorePlannerError(Exception):
    """Base class for all ChorePlanner errors."""


class ScheduleConfigError(ChorePlannerError):
    """Raised when scheduling input is malformed.

    Attributes:
        task_id: Task definition at fault, when the problem is task-specific
    """

    def __init__(self, message: str, task_id: str | None = None) -> None:
        """Initialize ScheduleConfigError.

        Args:
            message: Human readable description of the problem
            task_id: Optional id of the offending task definition
        """
        self.task_id = task_id
        super().__init__(message)
