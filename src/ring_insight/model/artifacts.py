"""Per-node artifact bundles as handed over by the artifact loaders.

Loaders turn the files of a diagnostic collection into primitive structures
(strings, numbers, dicts, lists). A loader that could not read an artifact
leaves it as None (missing) or puts an ``Unparsable`` marker in its place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

CASSANDRA_YAML = "cassandra.yaml"
DSE_YAML = "dse.yaml"
JVM_OPTIONS = "jvm.options"


@dataclass(frozen=True)
class Unparsable:
    """Marker for an artifact the loader found but could not parse."""

    reason: str


@dataclass
class NodeArtifacts:
    """Already-parsed artifacts of one node.

    Attributes:
        name: Node name (usually the collection folder); required
        listen_address: Address the node listens on; defaults to the name
        release: Release string reported by the node
        managed: True for managed-distribution nodes
        status: Status rows, dicts with status/address/load/tokens/
            ownership/host_id/rack/datacenter
        ring: Ring rows, dicts with address/datacenter/rack/status/state/
            load/ownership/token
        gossip: Endpoint address -> gossip state dict
        info: Info block dict (data_center, rack, load, uptime_seconds, id)
        configs: Config source (e.g. "cassandra.yaml") -> flattened key/value map
        logs: Raw system log lines
        metrics: Metric name -> scope ("" or "keyspace.table") -> value
        sstable_statistics: Dicts with the statistics file ``path`` and the
            metadata ``dump`` text
    """

    name: Optional[str] = None
    listen_address: Optional[str] = None
    release: Any = None
    managed: bool = False
    status: Any = None
    ring: Any = None
    gossip: Any = None
    info: Any = None
    configs: dict[str, Any] = field(default_factory=dict)
    logs: Any = None
    metrics: Any = None
    sstable_statistics: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeArtifacts:
        """Build from a JSON-style dict; ``{"unparsable": reason}`` marks a failed artifact."""

        def artifact(value: Any) -> Any:
            if isinstance(value, dict) and set(value) == {"unparsable"}:
                return Unparsable(str(value["unparsable"]))
            return value

        configs = {source: artifact(tree) for source, tree in (data.get("configs") or {}).items()}
        return cls(
            name=data.get("name"),
            listen_address=data.get("listen_address"),
            release=artifact(data.get("release")),
            managed=bool(data.get("managed", False)),
            status=artifact(data.get("status")),
            ring=artifact(data.get("ring")),
            gossip=artifact(data.get("gossip")),
            info=artifact(data.get("info")),
            configs=configs,
            logs=artifact(data.get("logs")),
            metrics=artifact(data.get("metrics")),
            sstable_statistics=artifact(data.get("sstable_statistics")),
        )
