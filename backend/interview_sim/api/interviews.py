from fastapi import APIRouter, Body, HTTPException

from interview_sim.submission.store import report_store

router = APIRouter(prefix="/api/interviews")


@router.post("", status_code=201)
def create_interview(payload: dict = Body(...)):
    if not isinstance(payload, dict) or not payload:
        raise HTTPException(status_code=400, detail="Interview payload is required")
    return {"_id": report_store.save(payload)}


@router.get("")
def list_interviews(limit: int = 50):
    return {"items": report_store.list(limit=limit)}


@router.get("/{interview_id}")
def get_interview(interview_id: str):
    item = report_store.get(interview_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Interview not found")
    return item
