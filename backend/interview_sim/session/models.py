from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.state import SessionPhase

if TYPE_CHECKING:
    from interview_sim.session.report import InterviewReport


class SessionPreconditionError(RuntimeError):
    """Programmer-visible misuse of the session lifecycle (fatal)."""


@dataclass
class AnswerSlot:
    question_id: int
    text: str = ""
    frozen: bool = False

    def freeze(self, text: str) -> None:
        if self.frozen:
            raise SessionPreconditionError(f"answer for question {self.question_id} is already frozen")
        self.text = str(text or "")
        self.frozen = True


@dataclass
class SessionState:
    cursor: int = 0
    remaining_seconds: int = 0
    phase: SessionPhase = SessionPhase.LOADING
    is_thinking: bool = False
    camera_enabled: bool = False
    is_shutting_down: bool = False
    recording_enabled: bool = True
    is_listening: bool = False

    def to_dict(self) -> dict:
        return {
            "cursor": self.cursor,
            "remaining_seconds": self.remaining_seconds,
            "phase": self.phase.value,
            "is_thinking": self.is_thinking,
            "camera_enabled": self.camera_enabled,
            "is_shutting_down": self.is_shutting_down,
            "recording_enabled": self.recording_enabled,
            "is_listening": self.is_listening,
        }


@dataclass
class SessionOutcome:
    phase: SessionPhase
    report: "InterviewReport"
    submission_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.phase == SessionPhase.SUBMITTED

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "submission_id": self.submission_id,
            "error": self.error,
            "report": self.report.to_dict(),
        }


@dataclass
class LiveScores:
    confidence: int = 0
    relevance: int = 0
    communication: int = 0

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "relevance": self.relevance,
            "communication": self.communication,
        }


@dataclass
class AnswerBuffers:
    answer: str = ""
    transcript: str = ""
    interim: str = ""

    def clear(self) -> None:
        self.answer = ""
        self.transcript = ""
        self.interim = ""

    def append_final(self, fragment: str) -> None:
        spacer = " " if self.answer and not self.answer.endswith(" ") else ""
        self.answer = self.answer + spacer + fragment
        self.transcript = f"{self.transcript} {fragment}" if self.transcript else fragment
        self.interim = ""
