from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from interview_sim.scoring.confidence import DETECTABLE_EXPRESSIONS, Expression

MAX_FACE_HITS = 10


@dataclass(frozen=True)
class FaceReading:
    """Expression intensities of one detected face, label -> [0, 1]."""
    expressions: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Frame:
    width: int
    height: int
    data: Any = None
    captured_at: float = 0.0
    # readings attached by a client that already ran detection
    readings: tuple[FaceReading, ...] = ()

    @property
    def has_dimensions(self) -> bool:
        return int(self.width or 0) > 0 and int(self.height or 0) > 0


class NoFrame:
    """Video signal without usable dimensions yet."""

    def __repr__(self) -> str:
        return "NO_FRAME"

    def __bool__(self) -> bool:
        return False


NO_FRAME = NoFrame()


class SampleStatus:
    NO_FRAME = "no_frame"
    FACES = "faces"
    NO_FACE = "no_face"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class PerceptionSample:
    generation: int
    status: str
    faces: tuple[FaceReading, ...] = ()
    forced: bool = False
    completed_at: float = 0.0

    @property
    def has_frame(self) -> bool:
        return self.status != SampleStatus.NO_FRAME


def _empty_counts() -> dict:
    return {expression.value: 0 for expression in DETECTABLE_EXPRESSIONS}


@dataclass
class PerceptionState:
    confidence: int = 0
    expression: Expression = Expression.UNKNOWN
    consecutive_face_hits: int = 0
    expression_counts: dict = field(default_factory=_empty_counts)
    last_raw_confidence: int = 0

    @property
    def face_detected(self) -> bool:
        return self.confidence > 0

    def reset_signal(self) -> None:
        """Camera turned off: drop the live reading, keep the counts."""
        self.confidence = 0
        self.expression = Expression.UNKNOWN
        self.consecutive_face_hits = 0
        self.last_raw_confidence = 0

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "expression": self.expression.value,
            "consecutive_face_hits": self.consecutive_face_hits,
            "face_detected": self.face_detected,
            "expression_counts": dict(self.expression_counts),
        }
