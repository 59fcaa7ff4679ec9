from interview_sim.perception.loop import PerceptionLoop, advance_perception
from interview_sim.perception.models import (
    NO_FRAME,
    FaceReading,
    Frame,
    NoFrame,
    PerceptionSample,
    PerceptionState,
    SampleStatus,
)
from interview_sim.perception.providers import (
    FaceDetector,
    FrameSource,
    PushedFrameSource,
    ReportedExpressionDetector,
)

__all__ = [
    "NO_FRAME",
    "FaceDetector",
    "FaceReading",
    "Frame",
    "FrameSource",
    "NoFrame",
    "PerceptionLoop",
    "PerceptionSample",
    "PerceptionState",
    "PushedFrameSource",
    "ReportedExpressionDetector",
    "SampleStatus",
    "advance_perception",
]
