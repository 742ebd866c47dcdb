"""Cluster and node data model."""

from .artifacts import CASSANDRA_YAML, DSE_YAML, NodeArtifacts, Unparsable
from .assembly import assemble_cluster, build_node
from .cluster import ClusterSnapshot
from .consistency import (
    NODE_SPECIFIC_SETTINGS,
    ConsistencyVerdict,
    consistency_verdicts,
    setting_names,
)
from .node import (
    UNKNOWN,
    GossipState,
    NodeInfo,
    NodeSnapshot,
    RingEntry,
    StatusRow,
    Workload,
)
from .settings import ConfigurationSetting, ConfigValue, Coverage
from .sstables import (
    SSTableStatistic,
    SSTableStatistics,
    parse_statistics_dump,
    table_identity_from_path,
)

__all__ = [
    "NodeArtifacts",
    "Unparsable",
    "CASSANDRA_YAML",
    "DSE_YAML",
    "assemble_cluster",
    "build_node",
    "ClusterSnapshot",
    "ConsistencyVerdict",
    "consistency_verdicts",
    "setting_names",
    "NODE_SPECIFIC_SETTINGS",
    "NodeSnapshot",
    "NodeInfo",
    "StatusRow",
    "RingEntry",
    "GossipState",
    "Workload",
    "UNKNOWN",
    "ConfigurationSetting",
    "ConfigValue",
    "Coverage",
    "SSTableStatistic",
    "SSTableStatistics",
    "parse_statistics_dump",
    "table_identity_from_path",
]
