import os
from pathlib import Path
from dotenv import load_dotenv

_BACKEND_ROOT = Path(__file__).resolve().parents[1]
_BACKEND_ENV_PATH = _BACKEND_ROOT / ".env"
load_dotenv(dotenv_path=_BACKEND_ENV_PATH, override=False)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    try:
        return max(minimum, float(os.getenv(name, default)))
    except (TypeError, ValueError):
        return default


ENV = str(os.getenv("ENV") or "development").strip().lower()

# question provider: "bank" (curated offline bank) or "openai"
QUESTION_PROVIDER = str(os.getenv("QUESTION_PROVIDER") or "bank").strip().lower()
OPENAI_API_KEY = str(os.getenv("OPENAI_API_KEY") or "").strip()
MODEL_NAME = str(os.getenv("MODEL_NAME") or "gpt-4.1-mini").strip()
QUESTION_TIMEOUT_SEC = _env_float("QUESTION_TIMEOUT_SEC", 12.0, minimum=0.5)

# submission: empty URL means the in-process report store is used
SUBMISSION_URL = str(os.getenv("SUBMISSION_URL") or "").strip()
SUBMISSION_TOKEN = str(os.getenv("SUBMISSION_TOKEN") or "").strip()
SUBMISSION_TIMEOUT_SEC = _env_float("SUBMISSION_TIMEOUT_SEC", 15.0, minimum=1.0)

COUNTDOWN_TICK_SEC = _env_float("COUNTDOWN_TICK_SEC", 1.0, minimum=0.001)
PERCEPTION_POLL_SEC = _env_float("PERCEPTION_POLL_SEC", 0.5, minimum=0.001)
DETECTION_TIMEOUT_SEC = _env_float("DETECTION_TIMEOUT_SEC", 1.0, minimum=0.001)
WATCHDOG_INTERVAL_SEC = _env_float("WATCHDOG_INTERVAL_SEC", 3.0, minimum=0.001)
WATCHDOG_STALL_SEC = _env_float("WATCHDOG_STALL_SEC", 3.0, minimum=0.001)
SHUTDOWN_GRACE_SEC = _env_float("SHUTDOWN_GRACE_SEC", 0.3)
FRAME_MAX_AGE_SEC = _env_float("FRAME_MAX_AGE_SEC", 2.0, minimum=0.1)

SESSION_CLEANUP_TTL_SEC = max(60, int(_env_float("SESSION_CLEANUP_TTL_SEC", 1800)))
SESSION_CLEANUP_INTERVAL_SEC = max(30, int(_env_float("SESSION_CLEANUP_INTERVAL_SEC", 120)))
