"""Integer rounding shared by every price computation."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf.

    Same result as the browser's ``Math.round`` so that client-side and
    server-side totals agree exactly (Python's ``round`` is half-to-even).
    """
    return int(math.floor(value + 0.5))
