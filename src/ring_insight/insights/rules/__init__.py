"""Rule implementations: read the RuleContext and produce Recommendations.

Rules are grouped by what they look at:
- versions: release support, patch level, mixed releases
- configuration: drift between nodes, vnodes, read repair
- topology: downed nodes, token ownership
- repair: incremental repair usage
- data_model: partitions, batches, tombstones, aggregations, prepared statements
- operations: dropped messages, GC, gossip pauses, commit log sync
"""

from .configuration import ConfigurationDriftRule, ReadRepairRule, VNodeCountRule
from .data_model import (
    AggregationQueryRule,
    LargeBatchRule,
    LargePartitionLogRule,
    LargePartitionMetricRule,
    PreparedStatementRule,
    TombstoneWarningRule,
)
from .operations import CommitLogSyncRule, DroppedMessagesRule, GCPauseRule, GossipPauseRule
from .repair import IncrementalRepairRule
from .topology import DownedNodesRule, TokenOwnershipRule, ring_ownership
from .versions import MixedVersionRule, VersionSupportRule


def get_default_rules() -> list:
    """Return all default rules, most urgent concerns first."""
    return [
        # Cluster-wide
        DownedNodesRule(),
        MixedVersionRule(),
        VersionSupportRule(),
        # Logs
        LargeBatchRule(),
        TombstoneWarningRule(),
        DroppedMessagesRule(),
        GCPauseRule(),
        AggregationQueryRule(),
        PreparedStatementRule(),
        LargePartitionLogRule(),
        GossipPauseRule(),
        CommitLogSyncRule(),
        # Metrics and configuration
        LargePartitionMetricRule(),
        ReadRepairRule(),
        IncrementalRepairRule(),
        ConfigurationDriftRule(),
        VNodeCountRule(),
        TokenOwnershipRule(),
    ]


__all__ = [
    "get_default_rules",
    "ring_ownership",
    "AggregationQueryRule",
    "CommitLogSyncRule",
    "ConfigurationDriftRule",
    "DownedNodesRule",
    "DroppedMessagesRule",
    "GCPauseRule",
    "GossipPauseRule",
    "IncrementalRepairRule",
    "LargeBatchRule",
    "LargePartitionLogRule",
    "LargePartitionMetricRule",
    "MixedVersionRule",
    "PreparedStatementRule",
    "ReadRepairRule",
    "TokenOwnershipRule",
    "TombstoneWarningRule",
    "VersionSupportRule",
    "VNodeCountRule",
]
