"""
Half-up decimal rounding.

Python's round() rounds halves to even, so 0.625 becomes 0.62. Scores and
generated figures round halves up (0.625 -> 0.63).
"""

import math


def round_half_up(value: float, places: int = 2) -> float:
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor
