from interview_sim.session.controller import InterviewSessionController
from interview_sim.session.models import (
    AnswerBuffers,
    AnswerSlot,
    LiveScores,
    SessionOutcome,
    SessionPreconditionError,
    SessionState,
)
from interview_sim.session.registry import SessionRegistry, session_registry
from interview_sim.session.report import InterviewReport, build_report, synthesize_feedback
from interview_sim.session.settings import SessionSettings

__all__ = [
    "AnswerBuffers",
    "AnswerSlot",
    "InterviewReport",
    "InterviewSessionController",
    "LiveScores",
    "SessionOutcome",
    "SessionPreconditionError",
    "SessionRegistry",
    "SessionSettings",
    "SessionState",
    "build_report",
    "session_registry",
    "synthesize_feedback",
]
