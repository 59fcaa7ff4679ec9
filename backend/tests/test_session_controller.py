import asyncio
import random
from dataclasses import replace

import pytest

from core.state import SessionPhase
from fakes import (
    FakeQuestionProvider,
    FakeSpeechProvider,
    FakeSubmissionClient,
    happy_frame,
    wait_until,
)
from interview_sim.perception.models import PerceptionSample, SampleStatus
from interview_sim.perception.providers import PushedFrameSource, ReportedExpressionDetector
from interview_sim.questions.providers import BankQuestionProvider
from interview_sim.scoring.confidence import Expression
from interview_sim.scoring.rounding import round_half_up
from interview_sim.session.controller import SUBMIT_TIMEOUT_MESSAGE, InterviewSessionController
from interview_sim.session.models import SessionPreconditionError

GOOD_ANSWER = (
    "First, the component keeps state in a hook. "
    "However, an effect synchronises it with the API when the props change."
)


def _controller(timings, **kwargs):
    kwargs.setdefault("question_provider", FakeQuestionProvider())
    kwargs.setdefault("submission_client", FakeSubmissionClient())
    return InterviewSessionController(timings=timings, **kwargs)


@pytest.mark.asyncio
async def test_start_loads_questions_and_countdown(fast_timings):
    controller = _controller(fast_timings)
    snapshot = await controller.start({"duration": "15", "questionCount": "3"})

    assert snapshot["question_count"] == 3
    assert snapshot["state"]["remaining_seconds"] == 900
    assert snapshot["state"]["phase"] == "active"
    assert snapshot["question"]["id"] == 1
    assert controller.used_fallback_questions is False
    await controller.close()


@pytest.mark.asyncio
async def test_start_twice_is_rejected(fast_timings):
    controller = _controller(fast_timings)
    await controller.start({"questionCount": 1})
    with pytest.raises(SessionPreconditionError):
        await controller.start({"questionCount": 1})
    await controller.close()


@pytest.mark.asyncio
async def test_question_provider_failure_falls_back(fast_timings):
    controller = _controller(fast_timings, question_provider=FakeQuestionProvider(error=RuntimeError("offline")))
    snapshot = await controller.start({"questionCount": 5})

    assert controller.used_fallback_questions is True
    assert snapshot["question_count"] == 5
    await controller.close()


@pytest.mark.asyncio
async def test_advance_without_question_set_is_a_precondition_error(fast_timings):
    controller = _controller(fast_timings)
    with pytest.raises(SessionPreconditionError):
        await controller.advance()


@pytest.mark.asyncio
async def test_advance_freezes_answer_and_records_sample(fast_timings):
    controller = _controller(fast_timings)
    await controller.start({"questionCount": 3})

    await controller.set_answer_text(GOOD_ANSWER)
    assert controller.live_scores().relevance == 100
    outcome = await controller.advance()

    assert outcome is None
    assert controller.state.cursor == 1
    assert controller.answers[0].frozen is True
    assert controller.answers[0].text == GOOD_ANSWER
    assert len(controller.metrics) == 1
    assert controller.metrics.samples[0].relevance == 100
    assert controller.buffers.answer == ""
    assert controller.live_scores().relevance == 0
    await controller.close()


@pytest.mark.asyncio
async def test_advance_on_last_question_ends_session(fast_timings):
    client = FakeSubmissionClient()
    controller = _controller(fast_timings, submission_client=client)
    await controller.start({"questionCount": 2})

    assert await controller.advance() is None
    outcome = await controller.advance()

    assert outcome is not None
    assert outcome.phase == SessionPhase.SUBMITTED
    assert outcome.submission_id == "report-1"
    assert controller.state.cursor == 1
    assert len(controller.metrics) == 2
    assert len(client.reports) == 1
    assert controller.finished.is_set()


@pytest.mark.asyncio
async def test_end_is_idempotent(fast_timings):
    client = FakeSubmissionClient()
    controller = _controller(fast_timings, submission_client=client)
    await controller.start({"questionCount": 3})

    first, second = await asyncio.gather(controller.end(), controller.end())
    third = await controller.end()

    assert first is second is third
    assert len(controller.metrics) == 1
    assert controller.submit_calls == 1
    assert len(client.reports) == 1


@pytest.mark.asyncio
async def test_advance_after_end_is_a_noop(fast_timings):
    controller = _controller(fast_timings)
    await controller.start({"questionCount": 3})
    await controller.end()

    assert await controller.advance() is None
    assert controller.state.cursor == 0
    assert len(controller.metrics) == 1


@pytest.mark.asyncio
async def test_timer_expiry_ends_session(fast_timings):
    timings = replace(fast_timings, countdown_tick_sec=0.001)
    controller = _controller(timings)
    await controller.start({"duration": 1, "questionCount": 3})

    outcome = await controller.wait_finished(timeout=5.0)

    assert outcome.phase == SessionPhase.SUBMITTED
    assert outcome.report.end_reason == "time_expired"
    assert controller.state.remaining_seconds == 0
    assert len(controller.metrics) == 1


@pytest.mark.asyncio
async def test_submission_failure_keeps_report(fast_timings):
    client = FakeSubmissionClient(error=RuntimeError("HTTP 500"))
    controller = _controller(fast_timings, submission_client=client)
    await controller.start({"questionCount": 2})
    await controller.set_answer_text(GOOD_ANSWER)

    outcome = await controller.end()

    assert outcome.phase == SessionPhase.SUBMIT_FAILED
    assert outcome.error == "Failed to save interview data: HTTP 500"
    assert outcome.report.answers == (GOOD_ANSWER, "")
    assert controller.state.phase == SessionPhase.SUBMIT_FAILED


@pytest.mark.asyncio
async def test_submission_timeout_is_reported(fast_timings):
    timings = replace(fast_timings, submission_timeout_sec=0.05)
    controller = _controller(timings, submission_client=FakeSubmissionClient(delay=5.0))
    await controller.start({"questionCount": 1})

    outcome = await controller.end()

    assert outcome.phase == SessionPhase.SUBMIT_FAILED
    assert outcome.error == SUBMIT_TIMEOUT_MESSAGE
    assert outcome.report is not None


@pytest.mark.asyncio
async def test_transcript_fragments_build_the_answer(fast_timings):
    speech = FakeSpeechProvider()
    controller = _controller(fast_timings, speech_provider=speech)
    await controller.start({"questionCount": 2})
    assert controller.state.is_listening is True

    await controller.ingest_transcript("the component", is_final=False)
    assert controller.buffers.interim == "the component"

    await controller.ingest_transcript("the component keeps state", is_final=True)
    await controller.ingest_transcript("in a hook", is_final=True)

    assert controller.buffers.answer == "the component keeps state in a hook"
    assert controller.buffers.interim == ""
    assert controller.live_scores().relevance == 67
    await controller.close()


@pytest.mark.asyncio
async def test_speech_provider_callbacks_reach_the_answer(fast_timings):
    speech = FakeSpeechProvider()
    controller = _controller(fast_timings, speech_provider=speech)
    await controller.start({"questionCount": 2})

    speech.listener.on_fragment("hooks manage state", True)

    assert await wait_until(lambda: controller.buffers.answer == "hooks manage state")
    await controller.close()


@pytest.mark.asyncio
async def test_thinking_pauses_capture_but_not_countdown(fast_timings):
    timings = replace(fast_timings, countdown_tick_sec=0.01)
    speech = FakeSpeechProvider()
    controller = _controller(timings, speech_provider=speech)
    await controller.start({"duration": 5, "questionCount": 2})

    await controller.enter_thinking()
    assert controller.state.phase == SessionPhase.THINKING
    assert controller.state.is_listening is False
    assert speech.stops == 1

    await controller.ingest_transcript("ignored while thinking", is_final=True)
    assert controller.buffers.answer == ""

    assert await wait_until(lambda: controller.state.remaining_seconds < 300)

    await controller.resume_answering()
    assert controller.state.phase == SessionPhase.ACTIVE
    assert controller.state.is_listening is True
    assert speech.starts == 2
    await controller.close()


@pytest.mark.asyncio
async def test_advance_leaves_thinking_mode(fast_timings):
    speech = FakeSpeechProvider()
    controller = _controller(fast_timings, speech_provider=speech)
    await controller.start({"questionCount": 3})

    await controller.enter_thinking()
    await controller.advance()

    assert controller.state.is_thinking is False
    assert controller.state.phase == SessionPhase.ACTIVE
    assert controller.state.is_listening is True
    await controller.close()


@pytest.mark.asyncio
async def test_recording_toggle(fast_timings):
    speech = FakeSpeechProvider()
    controller = _controller(fast_timings, speech_provider=speech)
    await controller.start({"questionCount": 2})

    assert await controller.set_recording(False) is False
    assert controller.state.is_listening is False

    # next question keeps capture off while recording is disabled
    await controller.advance()
    assert controller.state.is_listening is False

    assert await controller.set_recording(True) is True
    assert controller.state.is_listening is True
    await controller.close()


@pytest.mark.asyncio
async def test_camera_samples_feed_confidence_and_camera_off_resets(fast_timings):
    frame_source = PushedFrameSource(max_age_sec=30.0)
    controller = _controller(fast_timings, frame_source=frame_source, detector=ReportedExpressionDetector())
    await controller.start({"questionCount": 2})
    assert controller.state.camera_enabled is True

    frame_source.push(happy_frame(0.8))
    assert await wait_until(lambda: controller.perception.state.confidence > 0)
    assert controller.perception.state.expression == Expression.HAPPY

    assert await controller.set_camera(False) is False
    assert controller.perception.state.confidence == 0
    assert controller.perception.state.expression == Expression.UNKNOWN

    # a sample from before the toggle must not revive the reading
    late = PerceptionSample(
        generation=controller.perception.generation,
        status=SampleStatus.FACES,
        faces=happy_frame(0.9).readings,
    )
    controller._post(late)
    await asyncio.sleep(0.05)
    assert controller.perception.state.confidence == 0

    assert await controller.set_camera(True) is True
    assert await wait_until(lambda: controller.perception.state.confidence > 0)
    await controller.close()


@pytest.mark.asyncio
async def test_camera_toggle_without_camera_is_rejected(fast_timings):
    controller = _controller(fast_timings)
    await controller.start({"questionCount": 1})

    with pytest.raises(SessionPreconditionError):
        await controller.set_camera(True)
    assert await controller.set_camera(False) is False
    await controller.close()


@pytest.mark.asyncio
async def test_close_tears_down_without_submitting(fast_timings):
    client = FakeSubmissionClient()
    speech = FakeSpeechProvider()
    controller = _controller(fast_timings, submission_client=client, speech_provider=speech)
    await controller.start({"questionCount": 2})

    await controller.close()

    assert controller.state.phase == SessionPhase.CLOSED
    assert controller.submit_calls == 0
    assert client.reports == []
    assert controller.state.is_listening is False
    assert await controller.end() is None


@pytest.mark.asyncio
async def test_snapshot_reports_running_averages(fast_timings):
    controller = _controller(fast_timings)
    await controller.start({"questionCount": 3})

    await controller.set_answer_text(GOOD_ANSWER)
    await controller.advance()
    await controller.set_answer_text("")

    snapshot = controller.snapshot()
    assert snapshot["question_index"] == 1
    assert len(snapshot["samples"]) == 1
    assert snapshot["running_averages"]["relevance"] == 50
    assert snapshot["scores"]["relevance"] == 0
    assert snapshot["outcome"] is None
    await controller.close()


@pytest.mark.asyncio
async def test_end_to_end_four_questions(fast_timings):
    client = FakeSubmissionClient()
    frame_source = PushedFrameSource(max_age_sec=30.0)
    controller = InterviewSessionController(
        question_provider=BankQuestionProvider(random.Random(7)),
        submission_client=client,
        frame_source=frame_source,
        detector=ReportedExpressionDetector(),
        timings=fast_timings,
    )
    snapshot = await controller.start(
        {
            "position": "Backend Developer",
            "experience": "senior",
            "duration": "15",
            "questionCount": "4",
            "skills": ["Node.js"],
        }
    )
    assert snapshot["question_count"] == 4
    assert snapshot["state"]["remaining_seconds"] == 900

    frame_source.push(happy_frame(0.8))
    assert await wait_until(lambda: controller.perception.state.confidence > 0)

    outcome = None
    for question in controller.questions:
        phrases = " and ".join(question.key_phrases[:2])
        await controller.set_answer_text(f"In my last project I used {phrases} to solve a real problem for users.")
        outcome = await controller.advance()

    assert outcome is not None
    assert outcome.phase == SessionPhase.SUBMITTED
    assert controller.state.remaining_seconds == 900

    report = outcome.report
    assert len(report.per_question_samples) == 4
    assert all(answer for answer in report.answers)

    averages = {
        metric: round_half_up(sum(report.history(metric)) / 4)
        for metric in ("confidence", "relevance", "communication")
    }
    assert report.averages == averages
    assert report.overall_score == round_half_up(
        0.3 * averages["confidence"] + 0.4 * averages["relevance"] + 0.3 * averages["communication"]
    )
    assert report.position == "Backend Developer"
    assert client.reports == [report]
