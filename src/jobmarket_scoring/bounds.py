"""Score bounding helpers shared by every scorer.

Pure functions with no domain dependencies.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Python's built-in ``round`` uses banker's rounding (``round(12.5) == 12``);
    every score in this package rounds halves up instead.

    >>> round_half_up(12.5)
    13
    >>> round_half_up(33.33)
    33
    """
    # Trim float noise first so 64.4999999 from a weighted sum lands on 65.
    return int(math.floor(round(value, 6) + 0.5))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    """Clamp *value* to ``[low, high]``."""
    return max(low, min(high, value))
