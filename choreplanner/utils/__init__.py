# File: utils/__init__.py
"""Pure Python utilities for ChorePlanner.

Submodules:
    - dt_utils: Date/time parsing, window binding, interval arithmetic
    - coerce_utils: Defensive normalization of loosely-typed storage values

Usage:
    from . import dt_utils
    from .coerce_utils import coerce_string_set
"""

from . import coerce_utils, dt_utils

__all__ = ["coerce_utils", "dt_utils"]
