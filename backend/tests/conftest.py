import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from interview_sim.timings import SessionTimings  # noqa: E402


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "development")
    monkeypatch.setenv("QUESTION_PROVIDER", "bank")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.delenv("SUBMISSION_URL", raising=False)


@pytest.fixture
def fast_timings() -> SessionTimings:
    # countdown is slow on purpose so only the timer tests see it fire
    return SessionTimings(
        countdown_tick_sec=60.0,
        perception_poll_sec=0.01,
        detection_timeout_sec=0.1,
        watchdog_interval_sec=0.05,
        watchdog_stall_sec=0.05,
        shutdown_grace_sec=0.01,
        question_timeout_sec=0.5,
        submission_timeout_sec=0.5,
        speech_restart_after_end_sec=0.01,
        speech_restart_after_error_sec=0.02,
    )
