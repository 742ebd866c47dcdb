"""Cluster snapshot: all nodes of one diagnostic collection."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from ..config import ExecutionProfile
from ..load_errors import LoadErrorLog
from ..metrics.samples import MetricSampleList
from .artifacts import CASSANDRA_YAML
from .node import NodeSnapshot, StatusRow
from .settings import NOT_SET, ConfigurationSetting, ConfigValue


class ClusterSnapshot:
    """Read-only set of node snapshots plus cluster-wide facts.

    Node names are unique. The load-error log is the only part that keeps
    growing after construction (rules and lookups append to it).
    """

    def __init__(
        self,
        nodes: Iterable[NodeSnapshot],
        profile: Optional[ExecutionProfile] = None,
        load_errors: Optional[LoadErrorLog] = None,
    ):
        self._nodes: dict[str, NodeSnapshot] = {}
        for node in nodes:
            if node.name in self._nodes:
                raise ValueError(f"Duplicate node name: {node.name}")
            self._nodes[node.name] = node
        self.profile = profile or ExecutionProfile.default()
        self.load_errors = load_errors if load_errors is not None else LoadErrorLog()

    @property
    def nodes(self) -> tuple[NodeSnapshot, ...]:
        return tuple(self._nodes.values())

    @property
    def node_names(self) -> list[str]:
        return list(self._nodes)

    def node(self, name: str) -> Optional[NodeSnapshot]:
        return self._nodes.get(name)

    # === Versions ===

    @property
    def is_managed_variant(self) -> bool:
        return any(node.is_managed for node in self.nodes)

    @property
    def is_mixed_version(self) -> bool:
        """True when nodes resolve to more than one release line."""
        lines = {(node.version.product, node.version.line) for node in self.nodes}
        return len(lines) > 1

    def distinct_releases(self) -> list[str]:
        """Raw release strings in first-seen order."""
        seen: dict[str, None] = {}
        for node in self.nodes:
            seen.setdefault(node.version.release, None)
        return list(seen)

    def nodes_by_release(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for node in self.nodes:
            grouped.setdefault(node.version.release, []).append(node.name)
        return grouped

    # === Topology ===

    def dc_names(self) -> list[str]:
        seen: dict[str, None] = {}
        for node in self.nodes:
            seen.setdefault(node.datacenter, None)
        return list(seen)

    @property
    def is_multi_dc(self) -> bool:
        return len(self.dc_names()) > 1

    def nodes_in_dc(self, dc: str) -> list[NodeSnapshot]:
        return [node for node in self.nodes if node.datacenter == dc]

    def status_rows(self) -> list[StatusRow]:
        """Status rows by address, first reporter wins."""
        rows: dict[str, StatusRow] = {}
        for node in self.nodes:
            for row in node.status_rows:
                rows.setdefault(row.address, row)
        return list(rows.values())

    def downed_nodes(self) -> list[StatusRow]:
        return [row for row in self.status_rows() if row.is_down]

    # === Settings and metrics ===

    def setting(self, name: str, source: str = CASSANDRA_YAML, default: str = "") -> ConfigurationSetting:
        """Value of ``name`` on every node; absent keys become unset values."""
        setting = ConfigurationSetting(name)
        for node in self.nodes:
            value = node.setting(name, source)
            if value is None or value == NOT_SET:
                setting.add(node.name, ConfigValue(False, default, ""))
            else:
                setting.add(node.name, ConfigValue(True, default, str(value)))
        return setting

    def metric_samples(self, metric: str, scope: str = "") -> MetricSampleList:
        samples = MetricSampleList(metric, scope)
        for node in self.nodes:
            value = node.metric(metric, scope)
            if value is not None:
                samples.add(node.name, value)
        return samples

    def metric_scopes(self, metric: str) -> list[str]:
        seen: dict[str, None] = {}
        for node in self.nodes:
            for scope in node.metric_scopes(metric):
                seen.setdefault(scope, None)
        return list(seen)

    # === Logs ===

    def log_durations_hours(self) -> dict[str, float]:
        days = self.profile.limits.number_of_log_days
        return {node.name: node.log_duration_hours(days) for node in self.nodes}

    def is_log_window_truncated(self) -> bool:
        """True when some node has more logs than the analysis window covers."""
        days = self.profile.limits.number_of_log_days
        for node in self.nodes:
            span = node.log_span()
            window = node.log_window(days)
            if span is not None and window is not None and window[0] > span[0]:
                return True
        return False

    def __iter__(self) -> Iterator[NodeSnapshot]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self._nodes)
