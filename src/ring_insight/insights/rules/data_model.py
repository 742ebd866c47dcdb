"""Data-model findings from logs and table metrics.

Large partitions, oversized batches, tombstone-heavy reads, aggregation
queries and discarded prepared statements all point at how tables are
modelled or queried rather than at the nodes themselves.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from ...logs import signatures as sig
from ...metrics.formatting import human_bytes
from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ..context import RuleContext

# Repairs log oversized partitions of their own history table
REPAIR_HISTORY_TABLE = "system_distributed.repair_history"


class LargePartitionLogRule:
    """Partitions logged as too large during compaction."""

    name = "large_partitions_logged"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        by_table: dict[str, set[str]] = {}
        largest: dict[str, int] = {}
        for node, entries in context.log_matches(sig.LARGE_PARTITION).items():
            for entry in entries:
                table = entry.value.table
                by_table.setdefault(table, set()).add(node)
                largest[table] = max(largest.get(table, 0), entry.value.size_bytes)

        recs = []
        for table, nodes in by_table.items():
            size = human_bytes(largest[table])
            if table == REPAIR_HISTORY_TABLE:
                recs.append(
                    Recommendation.near(
                        Category.OPERATIONS,
                        f"The repair history table has partitions of up to {size}. We recommend "
                        "truncating system_distributed.repair_history.",
                        nodes,
                    )
                )
            else:
                recs.append(
                    Recommendation.near(
                        Category.DATAMODEL,
                        f"Table {table} has partitions of up to {size}. We recommend revisiting "
                        "its data model to keep partitions small.",
                        nodes,
                    )
                )
        return recs


class LargePartitionMetricRule:
    """Maximum partition size metric above the line's threshold."""

    name = "large_partitions_metric"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        offenders: dict[str, set[str]] = {}
        for node in context.cluster.nodes:
            version = node.version
            metric = version.max_partition_size_metric
            for scope in node.metric_scopes(metric):
                value = node.metric(metric, scope)
                if value is not None and value > version.large_partition_threshold_bytes:
                    offenders.setdefault(node.name, set()).add(scope or "unknown")

        if not offenders:
            return []
        tables = sorted({t for scopes in offenders.values() for t in scopes})
        threshold = human_bytes(context.cluster.nodes[0].version.large_partition_threshold_bytes)
        return [
            Recommendation.immediate(
                Category.DATAMODEL,
                f"{len(tables)} table(s) have partitions larger than {threshold}: "
                f"{', '.join(tables)}. We recommend changing their data model to split large partitions.",
                list(offenders),
            )
        ]


class LargeBatchRule:
    name = "large_batches"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        matches = context.log_matches(sig.LARGE_BATCH)
        nodes = [node for node, entries in matches.items() if entries]
        if not nodes:
            return []
        count = sum(len(matches[node]) for node in nodes)
        largest = max(entry.value.size_bytes for node in nodes for entry in matches[node])
        return [
            Recommendation.immediate(
                Category.DATAMODEL,
                f"{count} batches above the warning threshold were logged, the largest being "
                f"{human_bytes(largest)}. We recommend keeping batches small and single-partition.",
                nodes,
            )
        ]


class TombstoneWarningRule:
    """Days on which a node logged many tombstone warnings."""

    name = "tombstone_warnings"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        threshold = context.limits.tombstone_warnings_per_day_threshold
        nodes = []
        tables: set[str] = set()
        for node, entries in context.log_matches(sig.TOMBSTONE_WARNING).items():
            per_day = Counter(e.timestamp.date() for e in entries if e.timestamp is not None)
            if any(count >= threshold for count in per_day.values()):
                nodes.append(node)
                tables.update(e.value.table for e in entries)

        if not nodes:
            return []
        return [
            Recommendation.immediate(
                Category.DATAMODEL,
                f"Nodes logged at least {threshold} tombstone warnings in a single day, on "
                f"{len(tables)} table(s). We recommend reviewing the data model and delete "
                "patterns of these tables.",
                nodes,
            )
        ]


class AggregationQueryRule:
    """Aggregation queries logged more than a few times an hour."""

    name = "aggregation_queries"

    max_per_hour = 5

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        nodes = set(context.hit_budget(sig.AGGREGATION_QUERY))
        for node, entries in context.log_matches(sig.AGGREGATION_QUERY).items():
            if entries and len(entries) / context.log_hours(node) > self.max_per_hour:
                nodes.add(node)
        if not nodes:
            return []
        return [
            Recommendation.immediate(
                Category.OPERATIONS,
                f"Aggregation queries are used more than {self.max_per_hour} times per hour. "
                "We recommend avoiding aggregation queries, especially across multiple partitions.",
                nodes,
            )
        ]


class PreparedStatementRule:
    """Prepared statements evicted from the cache."""

    name = "prepared_statements"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        threshold = context.limits.prepared_statement_messages_per_hour_threshold
        nodes = set(context.hit_budget(sig.PREPARED_STATEMENTS_DISCARDED))
        for node, entries in context.log_matches(sig.PREPARED_STATEMENTS_DISCARDED).items():
            if entries and len(entries) / context.log_hours(node) > threshold:
                nodes.add(node)
        if not nodes:
            return []
        return [
            Recommendation.immediate(
                Category.DATAMODEL,
                "Prepared statements are being discarded from the cache. We recommend checking "
                "that the application prepares each statement only once.",
                nodes,
            )
        ]
