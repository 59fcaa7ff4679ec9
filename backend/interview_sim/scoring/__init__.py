from interview_sim.scoring.communication import score_communication
from interview_sim.scoring.confidence import (
    Expression,
    dominant_expression,
    raw_confidence,
    smooth_confidence,
)
from interview_sim.scoring.engine import TextScores, TextualScoringEngine
from interview_sim.scoring.relevance import score_relevance

__all__ = [
    "Expression",
    "TextScores",
    "TextualScoringEngine",
    "dominant_expression",
    "raw_confidence",
    "score_communication",
    "score_relevance",
    "smooth_confidence",
]
