from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from interview_sim.metrics.aggregator import MetricSample, MetricsAggregator
from interview_sim.scoring.rounding import round_half_up

OVERALL_WEIGHTS = {
    "confidence": 0.3,
    "relevance": 0.4,
    "communication": 0.3,
}

# tie-break order for both feedback lines
FEEDBACK_PRIORITY = ("confidence", "communication", "relevance")

STRENGTH_PHRASES = {
    "confidence": "confidence",
    "communication": "communication skills",
    "relevance": "relevance in your answers",
}

IMPROVEMENT_PHRASES = {
    "confidence": "confidence during interviews",
    "communication": "communication skills",
    "relevance": "answer relevance by including more key technical terms",
}


def overall_score(averages: dict) -> int:
    return round_half_up(sum(OVERALL_WEIGHTS[m] * int(averages.get(m, 0)) for m in OVERALL_WEIGHTS))


def strongest_metric(averages: dict) -> str:
    return max(FEEDBACK_PRIORITY, key=lambda m: averages.get(m, 0))


def weakest_metric(averages: dict) -> str:
    return min(FEEDBACK_PRIORITY, key=lambda m: averages.get(m, 0))


def synthesize_feedback(averages: dict) -> tuple[list[str], list[str]]:
    strength = f"You demonstrated good {STRENGTH_PHRASES[strongest_metric(averages)]}."
    improvement = f"Consider working on your {IMPROVEMENT_PHRASES[weakest_metric(averages)]}."
    return [strength], [improvement]


def _iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class InterviewReport:
    questions: tuple
    answers: tuple
    per_question_samples: tuple
    averages: dict
    overall_score: int
    strengths: tuple
    improvements: tuple
    position: str = ""
    experience: str = ""
    skills: tuple = ()
    end_reason: str = ""
    started_at: float | None = None
    ended_at: float | None = None
    expression_counts: dict = field(default_factory=dict)

    def history(self, metric: str) -> list[int]:
        return [getattr(s, metric) for s in self.per_question_samples]

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "experience": self.experience,
            "skills": list(self.skills),
            "questions": [q.to_dict() for q in self.questions],
            "answers": list(self.answers),
            "per_question_samples": [s.to_dict() for s in self.per_question_samples],
            "averages": dict(self.averages),
            "overall_score": self.overall_score,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "end_reason": self.end_reason,
            "started_at": _iso(self.started_at),
            "ended_at": _iso(self.ended_at),
            "expression_counts": dict(self.expression_counts),
        }

    def to_payload(self) -> dict:
        """Document shape expected by the interviews API."""
        domain = self.position or "Frontend Development"
        return {
            "settings": {
                "domain": domain,
                "type": "Technical",
                "skills": list(self.skills),
            },
            "domain": domain,
            "type": "Technical",
            "date": _iso(self.started_at),
            "score": self.overall_score,
            "performance": {
                "confidence": self.averages.get("confidence", 0),
                "communicationSkills": self.averages.get("communication", 0),
                "relevance": self.averages.get("relevance", 0),
                "fluency": 0,
            },
            "feedback": (
                [{"type": "strength", "content": line} for line in self.strengths]
                + [{"type": "improvement", "content": line} for line in self.improvements]
            ),
            "questions": [q.text for q in self.questions],
            "responses": list(self.answers),
            "endTime": _iso(self.ended_at),
            "metrics": {
                "facialExpressions": dict(self.expression_counts),
                "confidenceHistory": self.history("confidence"),
                "relevanceHistory": self.history("relevance"),
                "communicationHistory": self.history("communication"),
            },
        }


def build_report(
    questions,
    answers,
    metrics: MetricsAggregator,
    settings=None,
    end_reason: str = "",
    started_at: float | None = None,
    ended_at: float | None = None,
    expression_counts: dict | None = None,
) -> InterviewReport:
    """
    Averages come from the stored samples only, so the report can be
    recomputed from per_question_samples alone.
    """
    samples: tuple[MetricSample, ...] = metrics.samples
    averages = metrics.averages()
    strengths, improvements = synthesize_feedback(averages)

    answer_texts = [str(a or "") for a in answers][: len(questions)]
    answer_texts.extend([""] * (len(questions) - len(answer_texts)))

    return InterviewReport(
        questions=tuple(questions),
        answers=tuple(answer_texts),
        per_question_samples=samples,
        averages=averages,
        overall_score=overall_score(averages),
        strengths=tuple(strengths),
        improvements=tuple(improvements),
        position=getattr(settings, "position", "") or "",
        experience=getattr(settings, "experience", "") or "",
        skills=tuple(getattr(settings, "skills", ()) or ()),
        end_reason=end_reason,
        started_at=started_at,
        ended_at=ended_at,
        expression_counts=dict(expression_counts or {}),
    )
