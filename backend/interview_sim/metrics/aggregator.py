from dataclasses import dataclass

from interview_sim.scoring.rounding import clamp, round_half_up

METRICS = ("confidence", "relevance", "communication")


@dataclass(frozen=True)
class MetricSample:
    confidence: int
    relevance: int
    communication: int

    def __post_init__(self):
        for key in METRICS:
            object.__setattr__(self, key, clamp(getattr(self, key), 0, 100))

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "relevance": self.relevance,
            "communication": self.communication,
        }


class MetricsAggregator:

    def __init__(self):
        self._samples: list[MetricSample] = []

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> tuple[MetricSample, ...]:
        return tuple(self._samples)

    def append_sample(self, confidence: int, relevance: int, communication: int) -> MetricSample:
        sample = MetricSample(
            confidence=int(confidence),
            relevance=int(relevance),
            communication=int(communication),
        )
        self._samples.append(sample)
        return sample

    def history(self, metric: str) -> list[int]:
        self._check_metric(metric)
        return [getattr(s, metric) for s in self._samples]

    def average(self, metric: str) -> int:
        values = self.history(metric)
        if not values:
            return 0
        return round_half_up(sum(values) / len(values))

    def running_average(self, metric: str, current: int) -> int:
        # live panel value: stored history plus the in-progress score
        values = self.history(metric)
        if not values:
            return int(current)
        return round_half_up((sum(values) + int(current)) / (len(values) + 1))

    def averages(self) -> dict:
        return {metric: self.average(metric) for metric in METRICS}

    @staticmethod
    def _check_metric(metric: str) -> None:
        if metric not in METRICS:
            raise ValueError(f"Unknown metric: {metric}")
