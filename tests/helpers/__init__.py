"""Test helpers for ChorePlanner tests.

This module re-exports the factories for convenient imports:

    from tests.helpers import (
        WEEK_START, utc,
        make_task, make_member, make_context,
        make_availability, make_instance,
    )

See factories.py for full documentation.
"""

from tests.helpers.factories import (
    SATURDAY,
    WEEK_START,
    make_availability,
    make_context,
    make_instance,
    make_member,
    make_task,
    utc,
)

__all__ = [
    "SATURDAY",
    "WEEK_START",
    "make_availability",
    "make_context",
    "make_instance",
    "make_member",
    "make_task",
    "utc",
]
