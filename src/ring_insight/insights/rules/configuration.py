"""Configuration drift, vnode count and read repair settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...model.consistency import consistency_verdicts
from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ..context import RuleContext

# Table options, flattened as "keyspace.table.option"
TABLE_OPTIONS = "table_options"


class ConfigurationDriftRule:
    """Settings whose value differs between nodes, or that only some nodes report."""

    name = "configuration_drift"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        verdicts = consistency_verdicts(context.cluster)
        recs = []

        inconsistent = [v for v in verdicts.values() if not v.consistent]
        if inconsistent:
            nodes = {node for v in inconsistent for group in v.values.values() for node in group}
            names = ", ".join(v.setting for v in inconsistent)
            recs.append(
                Recommendation.near(
                    Category.CONFIGURATION,
                    f"The following settings differ between nodes: {names}. We recommend keeping "
                    "the configuration consistent across the cluster.",
                    nodes,
                )
            )

        partial = [v for v in verdicts.values() if v.coverage.is_partial]
        if partial:
            reporting = {node for v in partial for group in v.values.values() for node in group}
            missing = set(context.cluster.node_names) - reporting
            names = ", ".join(
                f"{v.setting} ({v.coverage.reporting}/{v.coverage.total} nodes)" for v in partial
            )
            recs.append(
                Recommendation.long(
                    Category.CONFIGURATION,
                    f"The following settings are only present on some nodes: {names}. We recommend "
                    "setting them explicitly on every node.",
                    missing or context.cluster.node_names,
                )
            )
        return recs


class VNodeCountRule:
    """num_tokens above the recommended vnode count."""

    name = "vnode_count"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        high: dict[int, list[str]] = {}
        recommended = None
        for node in context.cluster.nodes:
            if not node.version.supports_vnodes:
                continue
            raw = node.setting("num_tokens")
            if raw is None or not raw.strip().isdigit():
                continue
            tokens = int(raw)
            recommended = node.version.recommended_vnode_count
            if tokens > recommended:
                high.setdefault(tokens, []).append(node.name)

        recs = []
        for tokens, nodes in high.items():
            recs.append(
                Recommendation.long(
                    Category.CONFIGURATION,
                    f"Nodes are configured with num_tokens: {tokens}. We recommend using "
                    f"{recommended} vnodes with the token allocation algorithm when adding new "
                    "datacenters.",
                    nodes,
                )
            )
        return recs


class ReadRepairRule:
    """Background read repair enabled on tables of lines that still honor it."""

    name = "read_repair"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        cluster = context.cluster
        if not cluster.nodes[0].version.supports_read_repair:
            return []

        global_rr: set[str] = set()
        dc_local_rr: set[str] = set()
        for node in cluster.nodes:
            for key, value in node.configs.get(TABLE_OPTIONS, {}).items():
                table, _, option = key.rpartition(".")
                if _as_float(value) <= 0.0:
                    continue
                if option == "read_repair_chance":
                    global_rr.add(table)
                elif option == "dclocal_read_repair_chance":
                    dc_local_rr.add(table)

        recs = []
        if global_rr:
            recs.append(
                Recommendation.immediate(
                    Category.DATAMODEL,
                    f"{len(global_rr)} table(s) use global (multi-dc) read repair, which can add "
                    "significant overhead. We recommend setting read_repair_chance to zero on all tables.",
                )
            )
        if dc_local_rr:
            recs.append(
                Recommendation.immediate(
                    Category.DATAMODEL,
                    f"{len(dc_local_rr)} table(s) use dc local read repair. We recommend setting "
                    "dclocal_read_repair_chance to zero on all tables.",
                )
            )
        return recs


def _as_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0
