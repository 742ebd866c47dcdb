"""Node snapshot: everything known about one node, read-only."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Mapping, Optional

from ..logs.entry import LogEntry
from ..versions import VersionDescriptor
from .artifacts import CASSANDRA_YAML
from .sstables import SSTableStatistics

UNKNOWN = "UNKNOWN"


class Workload(Enum):
    CASSANDRA = "Cassandra"
    ANALYTICS = "Analytics"
    SEARCH = "Search"
    GRAPH = "Graph"


@dataclass(frozen=True)
class StatusRow:
    """One row of a status listing, as seen by the reporting node."""

    state: str  # two letters: Up/Down + Normal/Leaving/Joining/Moving
    address: str
    load: int = -1
    tokens: int = -1
    ownership: str = ""
    host_id: str = ""
    rack: str = UNKNOWN
    datacenter: str = UNKNOWN

    @property
    def is_down(self) -> bool:
        return self.state.startswith("D")

    @property
    def ownership_fraction(self) -> Optional[float]:
        """Ownership as a fraction, None when the listing shows '?'."""
        text = self.ownership.strip().rstrip("%").strip()
        try:
            return float(text) / 100.0
        except ValueError:
            return None


@dataclass(frozen=True)
class RingEntry:
    address: str
    token: str
    datacenter: str = UNKNOWN
    rack: str = UNKNOWN
    status: str = ""
    state: str = ""
    load: str = ""
    ownership: str = ""


@dataclass(frozen=True)
class GossipState:
    """Gossip application state of one endpoint."""

    generation: int = -1
    heartbeat: int = -1
    status: str = ""
    schema: str = ""
    dc: str = UNKNOWN
    rack: str = UNKNOWN
    release_version: str = ""
    internal_ip: str = ""
    rpc_address: str = ""
    dse_options: Mapping[str, Any] = field(default_factory=dict)
    host_id: str = ""
    rpc_ready: bool = False

    def workloads(self) -> frozenset[Workload]:
        result = {Workload.CASSANDRA}
        workload_text = str(self.dse_options.get("workloads", ""))
        if "Analytics" in workload_text:
            result.add(Workload.ANALYTICS)
        if "Search" in workload_text:
            result.add(Workload.SEARCH)
        if self.dse_options.get("graph") is True:
            result.add(Workload.GRAPH)
        return frozenset(result)


@dataclass(frozen=True)
class NodeInfo:
    """Info block of a node. Missing fields keep their sentinels."""

    datacenter: str = UNKNOWN
    rack: str = UNKNOWN
    load_bytes: int = -1
    uptime_seconds: Optional[int] = None
    host_id: str = ""


@dataclass(frozen=True, eq=False)
class NodeSnapshot:
    """Immutable view of one node's parsed artifacts.

    Identity is the node name: two snapshots with the same name are equal.
    """

    name: str
    version: VersionDescriptor
    listen_address: str = ""
    info: NodeInfo = field(default_factory=NodeInfo)
    status_rows: tuple[StatusRow, ...] = ()
    ring: tuple[RingEntry, ...] = ()
    gossip: Mapping[str, GossipState] = field(default_factory=dict)
    workloads: frozenset[Workload] = frozenset({Workload.CASSANDRA})
    sstables: SSTableStatistics = field(default_factory=SSTableStatistics)
    configs: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    logs: tuple[LogEntry, ...] = ()
    metrics: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    @property
    def datacenter(self) -> str:
        return self.info.datacenter

    @property
    def rack(self) -> str:
        return self.info.rack

    @property
    def uptime_seconds(self) -> Optional[int]:
        return self.info.uptime_seconds

    @property
    def is_managed(self) -> bool:
        return self.version.is_managed

    def setting(self, name: str, source: str = CASSANDRA_YAML) -> Optional[str]:
        """Value of a configuration key, or None when not present."""
        tree = self.configs.get(source)
        if tree is None or name not in tree:
            return None
        return tree[name]

    def metric(self, name: str, scope: str = "") -> Optional[float]:
        return self.metrics.get(name, {}).get(scope)

    def metric_scopes(self, name: str) -> list[str]:
        return list(self.metrics.get(name, {}))

    def log_span(self) -> Optional[tuple[datetime, datetime]]:
        """Oldest and newest timestamped log entries."""
        stamps = [e.timestamp for e in self.logs if e.timestamp is not None]
        if not stamps:
            return None
        return min(stamps), max(stamps)

    def log_window(self, days: int) -> Optional[tuple[datetime, datetime]]:
        """Span of logs considered for analysis: at most ``days`` before the newest entry."""
        span = self.log_span()
        if span is None:
            return None
        oldest, newest = span
        return max(oldest, newest - timedelta(days=days)), newest

    def log_duration_hours(self, days: int) -> float:
        window = self.log_window(days)
        if window is None:
            return 0.0
        return (window[1] - window[0]).total_seconds() / 3600.0

    def logs_within(self, days: int) -> list[LogEntry]:
        """Log entries inside the analysis window. Untimestamped lines are kept."""
        window = self.log_window(days)
        if window is None:
            return list(self.logs)
        cutoff = window[0]
        return [e for e in self.logs if e.timestamp is None or e.timestamp >= cutoff]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeSnapshot):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)
