import logging
from typing import Protocol

import httpx

from core import config
from interview_sim.submission.store import ReportStore, report_store

logger = logging.getLogger("interview_sim.submission")


class SubmissionError(RuntimeError):
    pass


class SubmissionTimeout(SubmissionError):
    pass


class SubmissionClient(Protocol):
    async def submit(self, report) -> str:
        ...


class HttpSubmissionClient:
    """Posts the report document to an interviews API and returns its id."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout_sec: float = config.SUBMISSION_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = str(base_url or "").rstrip("/")
        self.token = str(token or "")
        self.timeout_sec = float(timeout_sec)
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/interviews"

    async def submit(self, report) -> str:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
                response = await client.post(self.url, json=report.to_payload(), headers=headers)
        except httpx.TimeoutException as exc:
            raise SubmissionTimeout(f"submission timed out after {self.timeout_sec:.0f}s") from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"submission request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400:
            message = str(data.get("message") or f"HTTP {response.status_code}")
            raise SubmissionError(message)

        report_id = data.get("_id") or data.get("id")
        if not report_id:
            raise SubmissionError("submission response did not include an id")
        return str(report_id)


class LocalSubmissionClient:

    def __init__(self, store: ReportStore | None = None):
        self.store = store or report_store

    async def submit(self, report) -> str:
        return self.store.save(report.to_payload())


def build_submission_client() -> SubmissionClient:
    if config.SUBMISSION_URL:
        logger.info("submitting reports to %s", config.SUBMISSION_URL)
        return HttpSubmissionClient(config.SUBMISSION_URL, token=config.SUBMISSION_TOKEN)
    return LocalSubmissionClient()
