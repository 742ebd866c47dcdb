"""Cross-node metric summaries keyed by metric name and scope."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .samples import MetricSummary, summarize

if TYPE_CHECKING:
    from ..model.cluster import ClusterSnapshot


def summarize_metric(cluster: ClusterSnapshot, metric: str, scope: str = "") -> MetricSummary:
    return summarize(cluster.metric_samples(metric, scope))


def summaries_by_scope(cluster: ClusterSnapshot, metric: str) -> dict[str, MetricSummary]:
    """Summary of ``metric`` for every scope (node-wide "" or "keyspace.table") any node reported."""
    return {
        scope: summarize_metric(cluster, metric, scope) for scope in cluster.metric_scopes(metric)
    }
