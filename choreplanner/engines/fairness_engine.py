"""Fairness Engine - Rolling workload scores from prior weeks.

The assignment engine seeds every member's fairness score from a
user_id -> score map. This engine derives that map from assignment records
of earlier plans: each completed assignment of a published plan contributes
duration_min * fairness_weight, counted only when its plan week falls inside
the look-back window [week_start - weeks_back weeks, week_start).

The caller loads the records; nothing here touches storage.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_parse, dt_to_date

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import FairnessHistory, FairnessRecord


class FairnessEngine:
    """Pure aggregation of fairness history.

    All methods are static - no instance state.
    """

    @staticmethod
    def record_score(record: FairnessRecord | Mapping[str, Any]) -> float:
        """Workload contribution of one assignment record."""
        duration = record.get(const.DATA_HISTORY_DURATION_MIN) or 0
        weight = record.get(
            const.DATA_HISTORY_FAIRNESS_WEIGHT, const.DEFAULT_FAIRNESS_WEIGHT
        )
        return float(duration) * float(weight or 0)

    @staticmethod
    def calculate_fairness_history(
        records: Iterable[FairnessRecord | Mapping[str, Any]],
        week_start: date | datetime,
        weeks_back: int = const.DEFAULT_FAIRNESS_HISTORY_WEEKS,
    ) -> FairnessHistory:
        """Sum completed workload per user over the look-back window.

        Records carrying a plan_status only count when the plan is published.

        Args:
            records: Assignment records from prior plans
            week_start: Start of the week being scheduled (exclusive bound)
            weeks_back: Number of prior weeks to include

        Returns:
            user_id -> accumulated duration_min * fairness_weight. Users with
            no qualifying records are absent.

        Example:
            Two "done" 30 min weight-2 records for user-1 last week
            → {"user-1": 120.0}
        """
        current = dt_to_date(week_start)
        window_start = current - timedelta(weeks=max(0, weeks_back))
        scores: dict[str, float] = defaultdict(float)

        for record in records:
            if record.get(const.DATA_HISTORY_STATUS) != const.ASSIGNMENT_STATUS_DONE:
                continue

            plan_status = record.get(const.DATA_HISTORY_PLAN_STATUS)
            if plan_status is not None and plan_status != const.PLAN_STATUS_PUBLISHED:
                continue

            parsed = dt_parse(record.get(const.DATA_HISTORY_WEEK_START))
            if parsed is None:
                const.LOGGER.warning(
                    "FairnessEngine: Ignoring record with unparseable week_start %r",
                    record.get(const.DATA_HISTORY_WEEK_START),
                )
                continue

            record_week = parsed.date()
            if not window_start <= record_week < current:
                continue

            user_id = record.get(const.DATA_HISTORY_USER_ID)
            if not user_id:
                continue
            scores[user_id] += FairnessEngine.record_score(record)

        return dict(scores)


calculate_fairness_history = FairnessEngine.calculate_fairness_history
