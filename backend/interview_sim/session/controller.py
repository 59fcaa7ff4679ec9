import asyncio
import logging
import time
import uuid
from typing import Optional

from core.logger import log_event
from core.state import SessionPhase
from interview_sim.metrics.aggregator import METRICS, MetricsAggregator
from interview_sim.perception.loop import PerceptionLoop
from interview_sim.perception.models import PerceptionSample, PerceptionState
from interview_sim.perception.providers import FaceDetector, FrameSource
from interview_sim.questions.providers import QuestionProvider, load_question_set
from interview_sim.scoring.engine import TextualScoringEngine
from interview_sim.session.events import (
    Advance,
    AnswerTextChanged,
    End,
    EnterThinking,
    ResumeAnswering,
    SessionEvent,
    SetCamera,
    SetRecording,
    TimerTick,
    TranscriptFragment,
)
from interview_sim.session.models import (
    AnswerBuffers,
    AnswerSlot,
    LiveScores,
    SessionOutcome,
    SessionPreconditionError,
    SessionState,
)
from interview_sim.session.report import InterviewReport, build_report
from interview_sim.session.settings import SessionSettings
from interview_sim.speech.capture import SpeechCapture, SpeechToTextProvider
from interview_sim.submission.client import SubmissionClient, SubmissionTimeout
from interview_sim.timings import DEFAULT_TIMINGS, SessionTimings

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger("session_controller")

COMPONENT = "session_controller"

SUBMIT_TIMEOUT_MESSAGE = "Saving interview timed out. Your interview data might not be saved."


class InterviewSessionController:
    """
    Owns one interview session from question loading to submission.

    Every mutation goes through a single owning task that consumes the
    inbox: public calls post an event carrying a reply future and await
    it, while the countdown, the perception loop and speech capture post
    fire-and-forget events. Reads (snapshot) never go through the inbox.
    """

    def __init__(
        self,
        question_provider: QuestionProvider,
        submission_client: SubmissionClient,
        frame_source: Optional[FrameSource] = None,
        detector: Optional[FaceDetector] = None,
        speech_provider: Optional[SpeechToTextProvider] = None,
        timings: SessionTimings = DEFAULT_TIMINGS,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.question_provider = question_provider
        self.submission_client = submission_client
        self.timings = timings

        self.settings: Optional[SessionSettings] = None
        self.questions: tuple = ()
        self.answers: list[AnswerSlot] = []
        self.used_fallback_questions = False
        self.state = SessionState()
        self.buffers = AnswerBuffers()
        self.scoring = TextualScoringEngine()
        self.metrics = MetricsAggregator()
        self.outcome: Optional[SessionOutcome] = None
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None
        self.submit_calls = 0
        self.finished = asyncio.Event()

        self.perception: Optional[PerceptionLoop] = None
        if frame_source is not None and detector is not None:
            self.perception = PerceptionLoop(
                frame_source,
                detector,
                timings=timings,
                session_id=self.session_id,
            )

        self.speech: Optional[SpeechCapture] = None
        if speech_provider is not None:
            self.speech = SpeechCapture(
                speech_provider,
                self._post_fragment,
                timings=timings,
                session_id=self.session_id,
            )

        self._inbox: asyncio.Queue = asyncio.Queue()
        self._owner_task: Optional[asyncio.Task] = None
        self._countdown_task: Optional[asyncio.Task] = None
        self._current_event: Optional[SessionEvent] = None
        self._closed = False

        self._handlers = {
            TimerTick: self._on_tick,
            TranscriptFragment: self._on_transcript,
            AnswerTextChanged: self._on_answer_text,
            Advance: self._on_advance,
            End: self._on_end,
            EnterThinking: self._on_enter_thinking,
            ResumeAnswering: self._on_resume_answering,
            SetCamera: self._on_set_camera,
            SetRecording: self._on_set_recording,
        }

    # ---- lifecycle ----

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.state.cursor]

    @property
    def is_last_question(self) -> bool:
        return bool(self.questions) and self.state.cursor >= len(self.questions) - 1

    async def start(self, settings=None) -> dict:
        if self._owner_task is not None or self._closed:
            raise SessionPreconditionError("session was already started")

        self.settings = SessionSettings.coerce(settings)
        questions, used_fallback = await load_question_set(
            self.question_provider,
            self.settings.skills,
            self.settings.experience,
            self.settings.question_count,
            timeout_sec=self.timings.question_timeout_sec,
        )
        self.questions = tuple(questions)
        self.answers = [AnswerSlot(question_id=q.id) for q in self.questions]
        self.used_fallback_questions = used_fallback

        self.state.remaining_seconds = self.settings.duration_seconds
        self.state.phase = SessionPhase.ACTIVE
        self.started_at = time.time()

        self._owner_task = asyncio.create_task(self._run())
        self._countdown_task = asyncio.create_task(self._countdown())

        if self.perception is not None:
            self.state.camera_enabled = True
            self.perception.start(self._post)
        if self.speech is not None and self.state.recording_enabled:
            self.speech.start()
        self._sync_listening()

        logger.info(
            f"[SESSION {self.session_id}] started | questions={len(self.questions)} "
            f"duration={self.state.remaining_seconds}s fallback={used_fallback}"
        )
        log_event(
            COMPONENT,
            "session_started",
            self.session_id,
            question_count=len(self.questions),
            duration_sec=self.state.remaining_seconds,
            used_fallback=used_fallback,
            camera=self.state.camera_enabled,
            speech=self.speech is not None,
        )
        return self.snapshot()

    async def advance(self) -> Optional[SessionOutcome]:
        """Move to the next question; on the last one this ends the session."""
        return await self._request(Advance())

    async def end(self, reason: str = "user") -> Optional[SessionOutcome]:
        return await self._request(End(reason=reason))

    async def enter_thinking(self) -> None:
        await self._request(EnterThinking())

    async def resume_answering(self) -> None:
        await self._request(ResumeAnswering())

    async def set_answer_text(self, text: str) -> None:
        await self._request(AnswerTextChanged(text=str(text or "")))

    async def ingest_transcript(self, text: str, is_final: bool = True) -> None:
        await self._request(TranscriptFragment(text=str(text or ""), is_final=bool(is_final)))

    async def set_camera(self, enabled: bool) -> bool:
        return await self._request(SetCamera(enabled=bool(enabled)))

    async def set_recording(self, enabled: bool) -> bool:
        return await self._request(SetRecording(enabled=bool(enabled)))

    async def wait_finished(self, timeout: Optional[float] = None) -> Optional[SessionOutcome]:
        await asyncio.wait_for(self.finished.wait(), timeout=timeout)
        return self.outcome

    async def close(self) -> None:
        """Tear down without submitting; a finished session keeps its outcome."""
        if self._closed:
            return
        self._closed = True
        if not self.state.phase.is_terminal:
            self.state.phase = SessionPhase.CLOSED
        self.state.is_shutting_down = True
        self.state.camera_enabled = False

        tasks = []
        if self.perception is not None:
            tasks.extend(self.perception.halt())
        current = asyncio.current_task()
        for task in (self._countdown_task, self._owner_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
                tasks.append(task)
        if self.speech is not None:
            self.speech.shutdown()
        self._sync_listening()

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.finished.set()
        log_event(COMPONENT, "session_closed", self.session_id, phase=self.state.phase)

    # ---- read side ----

    def live_scores(self) -> LiveScores:
        confidence = self.perception.state.confidence if self.perception is not None else 0
        return LiveScores(
            confidence=confidence,
            relevance=self.scoring.relevance,
            communication=self.scoring.communication,
        )

    def snapshot(self) -> dict:
        self._sync_listening()
        live = self.live_scores()
        perception = self.perception.state if self.perception is not None else PerceptionState()
        question = self.current_question
        return {
            "session_id": self.session_id,
            "state": self.state.to_dict(),
            "question": question.to_dict() if question is not None else None,
            "question_index": self.state.cursor,
            "question_count": len(self.questions),
            "used_fallback_questions": self.used_fallback_questions,
            "answer": self.buffers.answer,
            "interim": self.buffers.interim,
            "transcript": self.buffers.transcript,
            "perception": perception.to_dict(),
            "scores": live.to_dict(),
            "running_averages": {
                metric: self.metrics.running_average(metric, getattr(live, metric))
                for metric in METRICS
            },
            "samples": [s.to_dict() for s in self.metrics.samples],
            "outcome": self.outcome.to_dict() if self.outcome is not None else None,
        }

    # ---- inbox ----

    def _post(self, item) -> None:
        self._inbox.put_nowait(item)

    def _post_fragment(self, text: str, is_final: bool) -> None:
        self._post(TranscriptFragment(text=text, is_final=is_final))

    async def _request(self, event: SessionEvent):
        if self._owner_task is None:
            raise SessionPreconditionError("session has not been started")
        if self._owner_task.done():
            return self._late_result(event)
        event.reply = asyncio.get_running_loop().create_future()
        self._post(event)
        return await event.reply

    def _late_result(self, event: SessionEvent):
        if isinstance(event, End):
            return self.outcome
        logger.info(f"[SESSION {self.session_id}] {type(event).__name__} ignored, session finished")
        return None

    async def _run(self) -> None:
        try:
            while not self.state.phase.is_terminal:
                item = await self._inbox.get()
                if isinstance(item, PerceptionSample):
                    self._on_perception_sample(item)
                    continue

                # left set if the owner is cancelled mid-handler so _drain can answer it
                self._current_event = item
                reply = item.reply
                try:
                    result = await self._handlers[type(item)](item)
                except Exception as exc:
                    self._current_event = None
                    if reply is not None and not reply.done():
                        reply.set_exception(exc)
                    else:
                        logger.exception(f"[SESSION {self.session_id}] {type(item).__name__} handler failed")
                    continue
                self._current_event = None
                if reply is not None and not reply.done():
                    reply.set_result(result)
        finally:
            self._drain()

    def _drain(self) -> None:
        pending = []
        if self._current_event is not None:
            pending.append(self._current_event)
            self._current_event = None
        while not self._inbox.empty():
            pending.append(self._inbox.get_nowait())
        for item in pending:
            reply = getattr(item, "reply", None)
            if reply is not None and not reply.done():
                reply.set_result(self._late_result(item))

    async def _countdown(self) -> None:
        while not self.state.is_shutting_down:
            await asyncio.sleep(self.timings.countdown_tick_sec)
            if self.state.is_shutting_down:
                return
            self._post(TimerTick())

    # ---- handlers (owner task only) ----

    def _on_perception_sample(self, sample: PerceptionSample) -> None:
        if self.perception is None or self.state.is_shutting_down or not self.state.camera_enabled:
            return
        self.perception.apply(sample)

    async def _on_tick(self, event: TimerTick) -> None:
        if self.state.is_shutting_down:
            return None
        self.state.remaining_seconds = max(0, self.state.remaining_seconds - 1)
        if self.state.remaining_seconds == 0:
            logger.info(f"[SESSION {self.session_id}] time is up")
            await self._end("time_expired")
        return None

    async def _on_transcript(self, event: TranscriptFragment) -> None:
        if self.state.is_shutting_down or self.state.is_thinking:
            return None
        text = event.text.strip()
        if not text:
            return None
        if event.is_final:
            self.buffers.append_final(text)
            self.scoring.update(self.buffers.answer, self.current_question)
        else:
            self.buffers.interim = text
        return None

    async def _on_answer_text(self, event: AnswerTextChanged) -> None:
        if self.state.is_shutting_down:
            return None
        self.buffers.answer = event.text
        self.scoring.update(self.buffers.answer, self.current_question)
        return None

    async def _on_advance(self, event: Advance) -> Optional[SessionOutcome]:
        if self.state.is_shutting_down:
            logger.info(f"[SESSION {self.session_id}] advance ignored, session is ending")
            return None
        if not self.questions:
            raise SessionPreconditionError("no question set is loaded")

        if self.is_last_question:
            return await self._end("completed")

        self._record_current_question()
        self.state.cursor += 1
        self.buffers.clear()
        self.scoring.update("", self.current_question)
        self.state.is_thinking = False
        self.state.phase = SessionPhase.ACTIVE
        if self.speech is not None and self.state.recording_enabled:
            self.speech.start()
        self._sync_listening()

        log_event(
            COMPONENT,
            "question_advanced",
            self.session_id,
            cursor=self.state.cursor,
            samples=len(self.metrics),
        )
        return None

    async def _on_end(self, event: End) -> Optional[SessionOutcome]:
        return await self._end(event.reason)

    async def _on_enter_thinking(self, event: EnterThinking) -> None:
        if self.state.is_shutting_down or self.state.is_thinking:
            return None
        self.state.is_thinking = True
        self.state.phase = SessionPhase.THINKING
        if self.speech is not None:
            self.speech.stop()
        self._sync_listening()
        log_event(COMPONENT, "thinking_started", self.session_id, cursor=self.state.cursor)
        return None

    async def _on_resume_answering(self, event: ResumeAnswering) -> None:
        if self.state.is_shutting_down or not self.state.is_thinking:
            return None
        self.state.is_thinking = False
        self.state.phase = SessionPhase.ACTIVE
        if self.speech is not None and self.state.recording_enabled:
            self.speech.start()
        self._sync_listening()
        log_event(COMPONENT, "thinking_ended", self.session_id, cursor=self.state.cursor)
        return None

    async def _on_set_camera(self, event: SetCamera) -> bool:
        if self.state.is_shutting_down:
            return False
        if self.perception is None:
            if event.enabled:
                raise SessionPreconditionError("no camera is attached to this session")
            return False

        if event.enabled:
            self.state.camera_enabled = True
            self.perception.start(self._post)
        else:
            self.state.camera_enabled = False
            self.perception.halt()
            self.perception.state.reset_signal()
        log_event(COMPONENT, "camera_toggled", self.session_id, enabled=self.state.camera_enabled)
        return self.state.camera_enabled

    async def _on_set_recording(self, event: SetRecording) -> bool:
        if self.state.is_shutting_down:
            return False
        self.state.recording_enabled = event.enabled
        if self.speech is not None:
            if event.enabled and not self.state.is_thinking:
                self.speech.start()
            elif not event.enabled:
                self.speech.stop()
        self._sync_listening()
        log_event(COMPONENT, "recording_toggled", self.session_id, enabled=event.enabled)
        return self.state.recording_enabled

    # ---- transitions ----

    def _sync_listening(self) -> None:
        self.state.is_listening = bool(self.speech is not None and self.speech.listening)

    def _record_current_question(self) -> None:
        slot = self.answers[self.state.cursor]
        if slot.frozen:
            return
        slot.freeze(self.buffers.answer)
        scores = self.scoring.update(self.buffers.answer, self.current_question)
        confidence = self.perception.state.confidence if self.perception is not None else 0
        sample = self.metrics.append_sample(confidence, scores.relevance, scores.communication)
        logger.info(
            "question recorded | session=%s question=%s confidence=%s relevance=%s communication=%s",
            self.session_id,
            slot.question_id,
            sample.confidence,
            sample.relevance,
            sample.communication,
        )

    async def _end(self, reason: str) -> Optional[SessionOutcome]:
        if self.state.is_shutting_down:
            return self.outcome

        self.state.is_shutting_down = True
        self.state.phase = SessionPhase.ENDING
        self.state.camera_enabled = False
        log_event(COMPONENT, "session_ending", self.session_id, reason=reason, cursor=self.state.cursor)

        if self.perception is not None:
            self.perception.halt()
        countdown = self._countdown_task
        if countdown is not None and countdown is not asyncio.current_task() and not countdown.done():
            countdown.cancel()

        # let in-flight detections land so they can be discarded
        await asyncio.sleep(self.timings.shutdown_grace_sec)

        self._record_current_question()

        if self.speech is not None:
            self.speech.shutdown()
        self._sync_listening()

        self.ended_at = time.time()
        expression_counts = self.perception.state.expression_counts if self.perception is not None else {}
        report = build_report(
            self.questions,
            [slot.text for slot in self.answers],
            self.metrics,
            settings=self.settings,
            end_reason=reason,
            started_at=self.started_at,
            ended_at=self.ended_at,
            expression_counts=expression_counts,
        )

        self.outcome = await self._submit(report)
        self.state.phase = self.outcome.phase
        self.finished.set()

        log_event(
            COMPONENT,
            "session_finished",
            self.session_id,
            phase=self.outcome.phase,
            reason=reason,
            overall_score=report.overall_score,
            averages=report.averages,
            submission_id=self.outcome.submission_id,
        )
        return self.outcome

    async def _submit(self, report: InterviewReport) -> SessionOutcome:
        self.submit_calls += 1
        try:
            submission_id = await asyncio.wait_for(
                self.submission_client.submit(report),
                timeout=self.timings.submission_timeout_sec,
            )
        except (asyncio.TimeoutError, SubmissionTimeout):
            logger.error(
                f"[SESSION {self.session_id}] submission timed out after {self.timings.submission_timeout_sec:.0f}s"
            )
            return SessionOutcome(SessionPhase.SUBMIT_FAILED, report, error=SUBMIT_TIMEOUT_MESSAGE)
        except Exception as exc:
            logger.error(f"[SESSION {self.session_id}] submission failed: {exc}")
            return SessionOutcome(
                SessionPhase.SUBMIT_FAILED,
                report,
                error=f"Failed to save interview data: {exc}",
            )

        logger.info(f"[SESSION {self.session_id}] interview saved | id={submission_id}")
        return SessionOutcome(SessionPhase.SUBMITTED, report, submission_id=str(submission_id))
