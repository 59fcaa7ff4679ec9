import logging
from dataclasses import dataclass

from interview_sim.scoring.communication import score_communication
from interview_sim.scoring.relevance import score_relevance

logger = logging.getLogger("textual_scoring")


@dataclass
class TextScores:
    relevance: int = 0
    communication: int = 0

    def to_dict(self) -> dict:
        return {
            "relevance": self.relevance,
            "communication": self.communication,
        }


class TextualScoringEngine:
    """
    Re-derives relevance and communication from the live answer.

    Holds nothing but the last computed pair; callers invoke update()
    whenever the answer text or the current question changes.
    """

    def __init__(self):
        self.scores = TextScores()

    @property
    def relevance(self) -> int:
        return self.scores.relevance

    @property
    def communication(self) -> int:
        return self.scores.communication

    def update(self, text: str, question=None) -> TextScores:
        if not str(text or "") or question is None:
            self.scores = TextScores()
            return self.scores

        self.scores = TextScores(
            relevance=score_relevance(text, question.key_phrases),
            communication=score_communication(text),
        )
        logger.debug(
            "scores updated | question=%s relevance=%s communication=%s",
            question.id,
            self.scores.relevance,
            self.scores.communication,
        )
        return self.scores

    def reset(self) -> TextScores:
        self.scores = TextScores()
        return self.scores
