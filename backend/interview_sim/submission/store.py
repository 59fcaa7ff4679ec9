import time
import uuid
from threading import Lock
from typing import Any


class ReportStore:
    """In-process report documents keyed by id; nothing is written to disk."""

    def __init__(self):
        self._lock = Lock()
        self._reports: dict[str, dict[str, Any]] = {}

    def save(self, payload: dict[str, Any]) -> str:
        report_id = uuid.uuid4().hex
        with self._lock:
            record = dict(payload or {})
            record["_id"] = report_id
            record.setdefault("createdAt", time.time())
            self._reports[report_id] = record
        return report_id

    def get(self, report_id: str) -> dict[str, Any] | None:
        rid = str(report_id or "").strip()
        if not rid:
            return None
        with self._lock:
            data = self._reports.get(rid)
            return dict(data) if isinstance(data, dict) else None

    def list(self, limit: int = 50) -> list[dict[str, Any]]:
        capped = max(1, min(int(limit or 50), 200))
        with self._lock:
            rows = [dict(item) for item in self._reports.values()]
        rows.sort(key=lambda item: float(item.get("createdAt") or 0.0))
        return rows[-capped:]

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)


report_store = ReportStore()
