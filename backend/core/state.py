# backend/core/state.py

from enum import Enum

class SessionPhase(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    THINKING = "thinking"
    ENDING = "ending"
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"
    CLOSED = "closed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionPhase.SUBMITTED, SessionPhase.SUBMIT_FAILED, SessionPhase.CLOSED)
