"""Half-up rounding helpers.

Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``).
Prices, scores and percentages in the output are rounded half away from
zero for positives, so 0.125 -> 0.13 and 72.5 -> 73.
"""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals with ties going up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_to_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_to_cents(value: float) -> float:
    return round_half_up(value, 2)
