import math


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; scores round .5 upwards.
    return int(math.floor(float(value) + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))
