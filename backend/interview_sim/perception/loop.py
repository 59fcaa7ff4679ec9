import asyncio
import logging
import time
from typing import Callable, Optional

from interview_sim.perception.models import (
    MAX_FACE_HITS,
    NO_FRAME,
    PerceptionSample,
    PerceptionState,
    SampleStatus,
)
from interview_sim.perception.providers import FaceDetector, FrameSource
from interview_sim.scoring.confidence import (
    Expression,
    dominant_expression,
    raw_confidence,
    smooth_confidence,
)
from interview_sim.timings import DEFAULT_TIMINGS, SessionTimings

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger("perception_loop")

EXPRESSION_COMMIT_THRESHOLD = 0.3
_WEAK_DISPLAY = (Expression.UNKNOWN, Expression.NEUTRAL)

SamplePoster = Callable[[PerceptionSample], None]


def advance_perception(state: PerceptionState, sample: PerceptionSample) -> PerceptionState:
    """
    Fold one completed sample into the perception state, in place.

    No frame: untouched, except an unconfirmed nonzero confidence drops to 0.
    No face (also timeouts and errors): confidence 0, expression unknown,
    one face hit lost. Face: smoothed confidence from the dominant
    expression; the displayed expression only moves on a clear reading.
    """
    if sample.status == SampleStatus.NO_FRAME:
        if state.confidence != 0 and state.consecutive_face_hits == 0:
            state.confidence = 0
        return state

    if not sample.faces:
        state.confidence = 0
        state.consecutive_face_hits = max(0, state.consecutive_face_hits - 1)
        state.expression = Expression.UNKNOWN
        return state

    state.consecutive_face_hits = min(MAX_FACE_HITS, state.consecutive_face_hits + 1)

    expression, intensity = dominant_expression(sample.faces[0].expressions)
    if intensity > EXPRESSION_COMMIT_THRESHOLD or state.expression in _WEAK_DISPLAY:
        state.expression = expression
        state.expression_counts[expression.value] = state.expression_counts.get(expression.value, 0) + 1

    raw_score = raw_confidence(expression, intensity)
    state.last_raw_confidence = raw_score
    state.confidence = smooth_confidence(raw_score, state.confidence)
    return state


class PerceptionLoop:
    """
    Polls the frame source through the detector and posts each completed
    sample to the session owner; a watchdog forces a sample when polling
    stalls. Samples are folded into `state` only via apply(), and only
    while the loop is running on the generation that produced them.
    """

    def __init__(
        self,
        frame_source: FrameSource,
        detector: FaceDetector,
        timings: SessionTimings = DEFAULT_TIMINGS,
        session_id: str = "",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.frame_source = frame_source
        self.detector = detector
        self.timings = timings
        self.session_id = session_id
        self.state = PerceptionState()
        self._clock = clock
        self._generation = 0
        self._active = False
        self._post: Optional[SamplePoster] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._watchdog_task: Optional[asyncio.Task] = None
        self._forced_tasks: set[asyncio.Task] = set()
        self.last_completed_at: float = clock()
        self.samples_completed = 0
        self.stall_recoveries = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return self._active and generation == self._generation

    def start(self, post: SamplePoster) -> None:
        if self._active:
            return
        self._generation += 1
        self._active = True
        self._post = post
        self.last_completed_at = self._clock()
        generation = self._generation
        self._poll_task = asyncio.create_task(self._poll_loop(generation))
        self._watchdog_task = asyncio.create_task(self._watchdog_loop(generation))
        logger.info(f"[PERCEPTION {self.session_id}] started | generation={generation}")

    def halt(self) -> list[asyncio.Task]:
        """Stop scheduling and cancel every timer; returns the cancelled tasks."""
        self._active = False
        tasks = [t for t in (self._poll_task, self._watchdog_task) if t is not None]
        tasks.extend(self._forced_tasks)
        for task in tasks:
            task.cancel()
        self._poll_task = None
        self._watchdog_task = None
        self._forced_tasks = set()
        return tasks

    async def stop(self) -> None:
        tasks = self.halt()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(
            f"[PERCEPTION {self.session_id}] stopped | samples={self.samples_completed} "
            f"stall_recoveries={self.stall_recoveries}"
        )

    def apply(self, sample: PerceptionSample) -> bool:
        if not self._is_current(sample.generation):
            logger.debug("stale perception sample discarded | generation=%s", sample.generation)
            return False
        advance_perception(self.state, sample)
        return True

    async def _read(self) -> tuple[str, tuple]:
        try:
            frame = await self.frame_source.next_frame()
        except Exception as exc:
            logger.warning("frame source failure | err=%s", exc)
            return SampleStatus.ERROR, ()

        if frame is NO_FRAME or not getattr(frame, "has_dimensions", False):
            return SampleStatus.NO_FRAME, ()

        try:
            faces = tuple(await self.detector.detect(frame) or ())
        except Exception as exc:
            logger.warning("face detection failure | err=%s", exc)
            return SampleStatus.ERROR, ()

        return (SampleStatus.FACES if faces else SampleStatus.NO_FACE), faces

    async def sample_once(self, generation: int, forced: bool = False) -> PerceptionSample:
        # frame fetch and detection share one deadline
        try:
            status, faces = await asyncio.wait_for(
                self._read(),
                timeout=self.timings.detection_timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.warning("perception sample timeout | after=%.2fs", self.timings.detection_timeout_sec)
            return self._completed(generation, SampleStatus.TIMEOUT, forced=forced)
        return self._completed(generation, status, faces=faces, forced=forced)

    def _completed(self, generation: int, status: str, faces=(), forced: bool = False) -> PerceptionSample:
        now = self._clock()
        self.last_completed_at = now
        self.samples_completed += 1
        return PerceptionSample(
            generation=generation,
            status=status,
            faces=tuple(faces),
            forced=forced,
            completed_at=now,
        )

    async def _sample_and_post(self, generation: int, forced: bool = False) -> None:
        sample = await self.sample_once(generation, forced=forced)
        if not self._is_current(generation) or self._post is None:
            return
        self._post(sample)

    async def _poll_loop(self, generation: int) -> None:
        while self._is_current(generation):
            await self._sample_and_post(generation)
            await asyncio.sleep(self.timings.perception_poll_sec)

    async def _watchdog_loop(self, generation: int) -> None:
        while self._is_current(generation):
            await asyncio.sleep(self.timings.watchdog_interval_sec)
            if not self._is_current(generation):
                return

            poll_task = self._poll_task
            if poll_task is not None and poll_task.done() and not poll_task.cancelled():
                logger.error(
                    f"[PERCEPTION {self.session_id}] poll loop died | err={poll_task.exception()!r}, restarting"
                )
                self._poll_task = asyncio.create_task(self._poll_loop(generation))

            elapsed = self._clock() - self.last_completed_at
            if elapsed <= self.timings.watchdog_stall_sec:
                continue
            if self._forced_tasks:
                logger.debug("forced sample still pending | session=%s", self.session_id)
                continue

            self.stall_recoveries += 1
            logger.error(
                f"[PERCEPTION {self.session_id}] detection stalled ({elapsed:.1f}s since last sample), forcing a sample"
            )
            task = asyncio.create_task(self._sample_and_post(generation, forced=True))
            self._forced_tasks.add(task)
            task.add_done_callback(self._forced_tasks.discard)
