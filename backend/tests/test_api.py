import pytest
from fastapi.testclient import TestClient

from interview_sim.main import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _start(client, **overrides) -> dict:
    body = {
        "position": "Backend Developer",
        "experience": "senior",
        "duration": "15",
        "questionCount": "2",
        "skills": ["Node.js"],
    }
    body.update(overrides)
    response = client.post("/api/sessions", json=body)
    assert response.status_code == 200
    return response.json()


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_session_flow_submits_to_local_store(client):
    started = _start(client)
    session_id = started["session_id"]
    assert started["question_count"] == 2
    assert started["state"]["remaining_seconds"] == 900

    answer = client.put(f"/api/sessions/{session_id}/answer", json={"text": "I used the event loop and streams."})
    assert answer.status_code == 200
    assert answer.json()["answer"] == "I used the event loop and streams."

    moved = client.post(f"/api/sessions/{session_id}/next")
    assert moved.status_code == 200
    assert moved.json()["question_index"] == 1

    transcript = client.post(
        f"/api/sessions/{session_id}/transcript",
        json={"text": "streams keep memory low", "isFinal": True},
    )
    assert transcript.json()["answer"] == "streams keep memory low"

    ended = client.post(f"/api/sessions/{session_id}/end", json={"reason": "user"})
    assert ended.status_code == 200
    outcome = ended.json()
    assert outcome["phase"] == "submitted"
    assert len(outcome["report"]["per_question_samples"]) == 2

    saved = client.get(f"/api/interviews/{outcome['submission_id']}")
    assert saved.status_code == 200
    assert saved.json()["score"] == outcome["report"]["overall_score"]
    assert saved.json()["responses"][1] == "streams keep memory low"

    again = client.post(f"/api/sessions/{session_id}/end")
    assert again.json()["submission_id"] == outcome["submission_id"]

    snapshot = client.get(f"/api/sessions/{session_id}").json()
    assert snapshot["active"] is False
    assert snapshot["state"]["phase"] == "submitted"


def test_thinking_and_resume(client):
    session_id = _start(client)["session_id"]

    thinking = client.post(f"/api/sessions/{session_id}/thinking").json()
    assert thinking["state"]["phase"] == "thinking"

    resumed = client.post(f"/api/sessions/{session_id}/resume").json()
    assert resumed["state"]["phase"] == "active"

    client.post(f"/api/sessions/{session_id}/end")


def test_frames_feed_perception(client):
    session_id = _start(client, camera=True)["session_id"]

    response = client.post(
        f"/api/sessions/{session_id}/frames",
        json={"width": 640, "height": 480, "faces": [{"expressions": {"happy": 0.9}}]},
    )
    assert response.status_code == 200
    assert response.json()["accepted"] is True

    camera_off = client.post(f"/api/sessions/{session_id}/camera", json={"enabled": False}).json()
    assert camera_off["state"]["camera_enabled"] is False
    assert camera_off["perception"]["confidence"] == 0

    client.post(f"/api/sessions/{session_id}/end")


def test_frames_without_camera_conflict(client):
    session_id = _start(client)["session_id"]
    response = client.post(f"/api/sessions/{session_id}/frames", json={"width": 640, "height": 480})
    assert response.status_code == 409

    camera = client.post(f"/api/sessions/{session_id}/camera", json={"enabled": True})
    assert camera.status_code == 409

    client.post(f"/api/sessions/{session_id}/end")


def test_unknown_session_is_404(client):
    assert client.get("/api/sessions/nope").status_code == 404
    assert client.post("/api/sessions/nope/next").status_code == 404


def test_interviews_endpoint_stores_documents(client):
    created = client.post("/api/interviews", json={"score": 70, "domain": "Frontend Development"})
    assert created.status_code == 201
    interview_id = created.json()["_id"]

    fetched = client.get(f"/api/interviews/{interview_id}")
    assert fetched.json()["score"] == 70
    assert client.get("/api/interviews/missing").status_code == 404


def test_oversized_answer_text_is_rejected(client):
    session_id = _start(client)["session_id"]
    too_long = "word " * 5000

    answer = client.put(f"/api/sessions/{session_id}/answer", json={"text": too_long})
    assert answer.status_code == 422

    transcript = client.post(f"/api/sessions/{session_id}/transcript", json={"text": too_long})
    assert transcript.status_code == 422

    assert client.get(f"/api/sessions/{session_id}").json()["answer"] == ""
    client.post(f"/api/sessions/{session_id}/end", json={"reason": "user"})
