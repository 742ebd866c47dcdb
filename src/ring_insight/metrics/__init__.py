"""Cross-node metric aggregation and display formatting."""

from .aggregator import summaries_by_scope, summarize_metric
from .formatting import human_bytes, human_count, parse_human_bytes
from .samples import MetricSampleList, MetricSummary, summarize

__all__ = [
    "MetricSampleList",
    "MetricSummary",
    "summarize",
    "summarize_metric",
    "summaries_by_scope",
    "human_count",
    "human_bytes",
    "parse_human_bytes",
]
