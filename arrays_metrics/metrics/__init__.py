"""Metric records, field merge policies, merging and derived-field resolution."""

from arrays_metrics.metrics.derived import resolve
from arrays_metrics.metrics.merge import merge, merge_all
from arrays_metrics.metrics.partial import MetricsResult, PartialResult
from arrays_metrics.metrics.records import NOT_COMPUTED, CallingMetrics, SampleMetrics

__all__ = [
    "NOT_COMPUTED",
    "CallingMetrics",
    "SampleMetrics",
    "PartialResult",
    "MetricsResult",
    "merge",
    "merge_all",
    "resolve",
]
