import json
import logging
from enum import Enum
from typing import Any

logger = logging.getLogger("interview_sim.events")

# candidate speech and typed answers never reach the event log verbatim
ANSWER_TEXT_KEYS = frozenset({"text", "answer", "answer_text", "transcript", "transcript_text", "fragment", "interim"})


def summarize_answer_text(value: Any) -> dict:
	text = str(value or "")
	return {"redacted": True, "length": len(text), "words": len(text.split())}


def _event_value(key: str, value: Any) -> Any:
	if key.lower() in ANSWER_TEXT_KEYS:
		return summarize_answer_text(value)
	if isinstance(value, Enum):
		return value.value
	if isinstance(value, (str, int, float, bool)) or value is None:
		return value
	if hasattr(value, "to_dict"):
		value = value.to_dict()
	if isinstance(value, dict):
		return {str(k): _event_value(str(k), v) for k, v in value.items()}
	if isinstance(value, (list, tuple, set)):
		return [_event_value(key, item) for item in value]
	return str(value)


def log_event(component: str, event: str, session_id: str, **fields) -> None:
	"""Emit one JSON line per session event; answer text is reduced to its size."""
	payload = {
		"component": str(component or "interview_sim"),
		"event": str(event or "unknown"),
		"session_id": str(session_id or ""),
	}
	payload.update({str(k): _event_value(str(k), v) for k, v in fields.items()})
	logger.info(json.dumps(payload, ensure_ascii=False, default=str))
