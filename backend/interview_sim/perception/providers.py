"""
Capabilities the perception loop samples through.

A FrameSource yields the latest video frame (or NO_FRAME while the signal
has no dimensions yet); a FaceDetector turns a frame into per-face
expression intensities. The concrete ML model behind a detector is not
this package's concern.
"""
from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable, Protocol, Union

from interview_sim.perception.models import NO_FRAME, FaceReading, Frame, NoFrame


class FrameSource(Protocol):
    async def next_frame(self) -> Union[Frame, NoFrame]:
        ...


class FaceDetector(Protocol):
    async def detect(self, frame: Frame) -> list[FaceReading]:
        ...


class PushedFrameSource:
    """
    Holds the most recent frame pushed by a client.

    Frames older than max_age_sec are treated as a signal without
    dimensions, so a client that stops pushing degrades to no data.
    """

    def __init__(self, max_age_sec: float = 2.0, clock: Callable[[], float] = time.monotonic):
        self.max_age_sec = float(max_age_sec)
        self._clock = clock
        self._latest: Frame | None = None

    def push(self, frame: Frame) -> Frame:
        stamped = replace(frame, captured_at=self._clock())
        self._latest = stamped
        return stamped

    def clear(self) -> None:
        self._latest = None

    async def next_frame(self) -> Union[Frame, NoFrame]:
        frame = self._latest
        if frame is None or not frame.has_dimensions:
            return NO_FRAME
        if (self._clock() - frame.captured_at) > self.max_age_sec:
            return NO_FRAME
        return frame


class ReportedExpressionDetector:
    """Detector for frames whose readings were computed client-side."""

    async def detect(self, frame: Frame) -> list[FaceReading]:
        return list(frame.readings or ())
