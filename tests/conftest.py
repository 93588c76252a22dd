"""Shared fixtures for ChorePlanner tests."""

from collections.abc import Iterator
from typing import Any

import pytest

from choreplanner.utils import dt_utils
from tests.helpers import make_member, make_task


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Restore the dt_utils default time zone after every test."""
    original = dt_utils.get_default_timezone()
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def parent_member() -> dict[str, Any]:
    """Adult member allowed to take adults-only tasks."""
    return make_member(
        member_id="member-parent",
        user_id="user-parent",
        role="parent",
        capabilities=["adult_only"],
        age=41,
    )


@pytest.fixture
def teen_member() -> dict[str, Any]:
    """Teen member without the adult_only capability."""
    return make_member(
        member_id="member-teen",
        user_id="user-teen",
        role="teen",
        capabilities=[],
        age=15,
    )


@pytest.fixture
def dog_walk_task() -> dict[str, Any]:
    """Daily 30 minute task in a 09:00-10:00 window."""
    return make_task(
        task_id="task-dog",
        name="Walk the dog",
        duration_min=30,
        frequency={"type": "daily"},
        time_windows=[{"start": "09:00", "end": "10:00"}],
    )


@pytest.fixture
def bathroom_task() -> dict[str, Any]:
    """Adults-only Saturday task in a 10:00-12:00 window."""
    return make_task(
        task_id="task-bathroom",
        name="Clean bathroom",
        duration_min=45,
        frequency={"type": "weekly", "byWeekday": [6]},
        time_windows=[{"start": "10:00", "end": "12:00"}],
        constraints={"adultsOnly": True},
        fairness_weight=2,
    )
