"""Constraint Engine - Pure eligibility checks for task/member pairs.

ARCHITECTURE: Stateless predicate with no side effects. Inputs are assumed
well-typed: task constraints are normalized into TaskConstraints when tasks
are expanded, and member capability/allergy sets are coerced by the
availability engine. Nothing here re-validates raw storage data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..type_defs import TaskConstraintsData
    from .availability_engine import MemberAvailability


@dataclass(frozen=True)
class TaskConstraints:
    """Normalized eligibility rules of a task instance.

    Attributes:
        adults_only: Member must hold the adult_only capability
        required_capabilities: Member must hold every one of these
        exclude_allergies: Member must hold none of these
        minimum_age: Member age must be known and at least this value
    """

    adults_only: bool = False
    required_capabilities: frozenset[str] = frozenset()
    exclude_allergies: frozenset[str] = frozenset()
    minimum_age: int | None = None

    @classmethod
    def from_data(
        cls, data: TaskConstraintsData | dict[str, Any] | None
    ) -> TaskConstraints | None:
        """Build from a task definition's constraints dict (None stays None)."""
        if not data:
            return None
        return cls(
            adults_only=bool(data.get(const.DATA_CONSTRAINT_ADULTS_ONLY, False)),
            required_capabilities=frozenset(
                data.get(const.DATA_CONSTRAINT_REQUIRED_CAPABILITIES) or ()
            ),
            exclude_allergies=frozenset(
                data.get(const.DATA_CONSTRAINT_EXCLUDE_ALLERGIES) or ()
            ),
            minimum_age=data.get(const.DATA_CONSTRAINT_MINIMUM_AGE),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return the constraints in task-definition key format."""
        result: dict[str, Any] = {}
        if self.adults_only:
            result[const.DATA_CONSTRAINT_ADULTS_ONLY] = True
        if self.required_capabilities:
            result[const.DATA_CONSTRAINT_REQUIRED_CAPABILITIES] = sorted(
                self.required_capabilities
            )
        if self.exclude_allergies:
            result[const.DATA_CONSTRAINT_EXCLUDE_ALLERGIES] = sorted(
                self.exclude_allergies
            )
        if self.minimum_age is not None:
            result[const.DATA_CONSTRAINT_MINIMUM_AGE] = self.minimum_age
        return result


class ConstraintEngine:
    """Pure logic engine for member eligibility.

    All methods are static - no instance state.
    """

    @staticmethod
    def satisfies_constraints(
        member: MemberAvailability, constraints: TaskConstraints | None
    ) -> bool:
        """Check whether a member may take a task with these constraints.

        All checks are conjunctive; the first failing check rejects.

        Args:
            member: Member availability (capabilities/allergies already sets)
            constraints: Normalized task constraints, or None for "anyone"

        Returns:
            True if the member satisfies every rule
        """
        if constraints is None:
            return True

        if (
            constraints.adults_only
            and const.CAPABILITY_ADULT_ONLY not in member.capabilities
        ):
            return False

        if not constraints.required_capabilities <= member.capabilities:
            return False

        if constraints.exclude_allergies & member.allergies:
            return False

        if constraints.minimum_age is not None and (
            member.age is None or member.age < constraints.minimum_age
        ):
            return False

        return True


satisfies_constraints = ConstraintEngine.satisfies_constraints
