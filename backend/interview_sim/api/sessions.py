import asyncio
import logging

from fastapi import APIRouter, HTTPException

from core import config
from interview_sim.perception.models import FaceReading, Frame
from interview_sim.perception.providers import PushedFrameSource, ReportedExpressionDetector
from interview_sim.questions.providers import build_question_provider
from interview_sim.schemas import (
    AnswerTextRequest,
    EndSessionRequest,
    FrameRequest,
    StartSessionRequest,
    ToggleRequest,
    TranscriptRequest,
)
from interview_sim.session.controller import InterviewSessionController
from interview_sim.session.models import SessionPreconditionError
from interview_sim.session.registry import session_registry
from interview_sim.submission.client import build_submission_client

router = APIRouter(prefix="/api/sessions")
logger = logging.getLogger("interview_sim.api.sessions")

_finish_watchers: set[asyncio.Task] = set()


def _get_item(session_id: str) -> dict:
    item = session_registry.get(session_id)
    if not item or item.get("controller") is None:
        raise HTTPException(status_code=404, detail="Session not found")
    session_registry.touch(session_id)
    return item


def _get_controller(session_id: str) -> InterviewSessionController:
    return _get_item(session_id)["controller"]


async def _call(operation):
    try:
        return await operation
    except SessionPreconditionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


async def _watch_finish(session_id: str, controller: InterviewSessionController) -> None:
    await controller.finished.wait()
    session_registry.mark_inactive(session_id)
    logger.info("[SESSION %s] finished | phase=%s", session_id, controller.state.phase.value)


@router.post("")
async def start_session(req: StartSessionRequest):
    frame_source = None
    detector = None
    if req.camera:
        frame_source = PushedFrameSource(max_age_sec=config.FRAME_MAX_AGE_SEC)
        detector = ReportedExpressionDetector()

    controller = InterviewSessionController(
        question_provider=build_question_provider(),
        submission_client=build_submission_client(),
        frame_source=frame_source,
        detector=detector,
    )
    snapshot = await _call(controller.start(req.settings_payload()))
    session_registry.register(controller.session_id, controller, frame_source=frame_source)

    watcher = asyncio.create_task(_watch_finish(controller.session_id, controller))
    _finish_watchers.add(watcher)
    watcher.add_done_callback(_finish_watchers.discard)
    return snapshot


@router.get("/{session_id}")
async def get_session(session_id: str):
    item = _get_item(session_id)
    payload = item["controller"].snapshot()
    payload["active"] = bool(item.get("active", False))
    return payload


@router.put("/{session_id}/answer")
async def put_answer(session_id: str, req: AnswerTextRequest):
    controller = _get_controller(session_id)
    await _call(controller.set_answer_text(req.text))
    return controller.snapshot()


@router.post("/{session_id}/transcript")
async def post_transcript(session_id: str, req: TranscriptRequest):
    controller = _get_controller(session_id)
    await _call(controller.ingest_transcript(req.text, req.is_final))
    return controller.snapshot()


@router.post("/{session_id}/frames")
async def post_frame(session_id: str, req: FrameRequest):
    item = _get_item(session_id)
    frame_source = item.get("frame_source")
    if frame_source is None:
        raise HTTPException(status_code=409, detail="Session was started without a camera")
    frame_source.push(
        Frame(
            width=req.width,
            height=req.height,
            readings=tuple(FaceReading(expressions=dict(face.expressions)) for face in req.faces),
        )
    )
    return {"accepted": True, "perception": item["controller"].snapshot()["perception"]}


@router.post("/{session_id}/thinking")
async def enter_thinking(session_id: str):
    controller = _get_controller(session_id)
    await _call(controller.enter_thinking())
    return controller.snapshot()


@router.post("/{session_id}/resume")
async def resume_answering(session_id: str):
    controller = _get_controller(session_id)
    await _call(controller.resume_answering())
    return controller.snapshot()


@router.post("/{session_id}/camera")
async def set_camera(session_id: str, req: ToggleRequest):
    controller = _get_controller(session_id)
    await _call(controller.set_camera(req.enabled))
    return controller.snapshot()


@router.post("/{session_id}/recording")
async def set_recording(session_id: str, req: ToggleRequest):
    controller = _get_controller(session_id)
    await _call(controller.set_recording(req.enabled))
    return controller.snapshot()


@router.post("/{session_id}/next")
async def next_question(session_id: str):
    controller = _get_controller(session_id)
    await _call(controller.advance())
    return controller.snapshot()


@router.post("/{session_id}/end")
async def end_session(session_id: str, req: EndSessionRequest | None = None):
    controller = _get_controller(session_id)
    reason = req.reason if req is not None else "user"
    outcome = await _call(controller.end(reason))
    if outcome is None:
        raise HTTPException(status_code=409, detail="Session was closed without a report")
    session_registry.mark_inactive(session_id)
    return outcome.to_dict()


async def close_all_sessions() -> int:
    closed = 0
    for session_id, item in session_registry.items():
        controller = item.get("controller")
        if controller is None:
            continue
        await controller.close()
        session_registry.mark_inactive(session_id)
        closed += 1
    return closed
