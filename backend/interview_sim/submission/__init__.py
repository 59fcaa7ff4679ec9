from interview_sim.submission.client import (
    HttpSubmissionClient,
    LocalSubmissionClient,
    SubmissionClient,
    SubmissionError,
    SubmissionTimeout,
    build_submission_client,
)
from interview_sim.submission.store import ReportStore, report_store

__all__ = [
    "HttpSubmissionClient",
    "LocalSubmissionClient",
    "ReportStore",
    "SubmissionClient",
    "SubmissionError",
    "SubmissionTimeout",
    "build_submission_client",
    "report_store",
]
