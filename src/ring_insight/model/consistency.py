"""Consistency verdicts for every configuration setting of a cluster."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from .artifacts import CASSANDRA_YAML
from .settings import Coverage

if TYPE_CHECKING:
    from .cluster import ClusterSnapshot

# Settings expected to differ from node to node
NODE_SPECIFIC_SETTINGS = frozenset(
    {
        "listen_address",
        "listen_interface",
        "broadcast_address",
        "rpc_address",
        "rpc_interface",
        "broadcast_rpc_address",
        "native_transport_address",
        "initial_token",
    }
)


@dataclass(frozen=True)
class ConsistencyVerdict:
    """Whether reporting nodes agree on a setting, and how many reported it."""

    setting: str
    consistent: bool
    coverage: Coverage
    values: dict[str, list[str]] = field(default_factory=dict)

    @property
    def needs_attention(self) -> bool:
        return not self.consistent or self.coverage.is_partial


def setting_names(cluster: ClusterSnapshot, source: str = CASSANDRA_YAML) -> list[str]:
    names: set[str] = set()
    for node in cluster.nodes:
        names.update(node.configs.get(source, {}))
    return sorted(names)


def consistency_verdicts(
    cluster: ClusterSnapshot,
    source: str = CASSANDRA_YAML,
    exclude: Iterable[str] = NODE_SPECIFIC_SETTINGS,
) -> dict[str, ConsistencyVerdict]:
    """Verdict for every setting any node reported in ``source``."""
    excluded = set(exclude)
    total = len(cluster)
    verdicts = {}
    for name in setting_names(cluster, source):
        if name in excluded:
            continue
        setting = cluster.setting(name, source)
        verdicts[name] = ConsistencyVerdict(
            setting=name,
            consistent=setting.is_consistent(),
            coverage=setting.coverage(total),
            values=setting.nodes_by_value(),
        )
    return verdicts
