from interview_sim.metrics.aggregator import METRICS, MetricSample, MetricsAggregator

__all__ = ["METRICS", "MetricSample", "MetricsAggregator"]
