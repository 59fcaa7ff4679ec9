from enum import Enum
from typing import Mapping

from interview_sim.scoring.rounding import clamp, round_half_up

MIN_CONFIDENCE = 10
MAX_CONFIDENCE = 100
SMOOTHING_NEW_WEIGHT = 0.7
SMOOTHING_PREVIOUS_WEIGHT = 0.3


class Expression(str, Enum):
    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    FEARFUL = "fearful"
    DISGUSTED = "disgusted"
    SURPRISED = "surprised"
    UNKNOWN = "unknown"


# order matters: the first label wins a tie on intensity
DETECTABLE_EXPRESSIONS = (
    Expression.NEUTRAL,
    Expression.HAPPY,
    Expression.SAD,
    Expression.ANGRY,
    Expression.FEARFUL,
    Expression.DISGUSTED,
    Expression.SURPRISED,
)

# expression -> (base, scale)
CONFIDENCE_TABLE = {
    Expression.HAPPY: (50, 50),
    Expression.NEUTRAL: (40, 20),
    Expression.SURPRISED: (30, 20),
    Expression.SAD: (15, 25),
    Expression.FEARFUL: (10, 25),
    Expression.ANGRY: (10, 20),
    Expression.DISGUSTED: (10, 20),
}

FALLBACK_RAW_SCORE = 50


def _intensity(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def dominant_expression(intensities: Mapping[str, float]) -> tuple[Expression, float]:
    """
    Strongest label among the detectable expressions.

    Non-numeric readings count as 0. With nothing above 0 the result is
    neutral at intensity 0.
    """
    readings = {str(k).lower(): v for k, v in dict(intensities or {}).items()}
    best = Expression.NEUTRAL
    best_value = 0.0
    for expression in DETECTABLE_EXPRESSIONS:
        value = _intensity(readings.get(expression.value))
        if value > best_value:
            best = expression
            best_value = value
    return best, best_value


def raw_confidence(expression: Expression, intensity: float) -> int:
    entry = CONFIDENCE_TABLE.get(expression)
    if entry is None:
        return FALLBACK_RAW_SCORE
    base, scale = entry
    strength = max(0.0, min(1.0, float(intensity)))
    return base + round_half_up(strength * scale)


def smooth_confidence(raw_score: int, previous: int) -> int:
    if previous > 0:
        blended = round_half_up(SMOOTHING_NEW_WEIGHT * raw_score + SMOOTHING_PREVIOUS_WEIGHT * previous)
    else:
        blended = int(raw_score)
    return clamp(blended, MIN_CONFIDENCE, MAX_CONFIDENCE)
