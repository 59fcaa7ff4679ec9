"""
Typed messages consumed by the session's owning task.

Every state change of a running session arrives as one of these; events
posted by callers carry a `reply` future resolved by the owner.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Union

from interview_sim.perception.models import PerceptionSample


@dataclass
class SessionEvent:
    reply: Optional[asyncio.Future] = field(default=None, compare=False, repr=False, kw_only=True)


@dataclass
class TimerTick(SessionEvent):
    pass


@dataclass
class TranscriptFragment(SessionEvent):
    text: str = ""
    is_final: bool = False


@dataclass
class AnswerTextChanged(SessionEvent):
    text: str = ""


@dataclass
class Advance(SessionEvent):
    pass


@dataclass
class End(SessionEvent):
    reason: str = "user"


@dataclass
class EnterThinking(SessionEvent):
    pass


@dataclass
class ResumeAnswering(SessionEvent):
    pass


@dataclass
class SetCamera(SessionEvent):
    enabled: bool = True


@dataclass
class SetRecording(SessionEvent):
    enabled: bool = True


InboxItem = Union[SessionEvent, PerceptionSample]
