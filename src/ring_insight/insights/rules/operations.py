"""Operational health from logs: dropped messages, GC, gossip and commit log stalls."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...logs import signatures as sig
from ..models import Category, Recommendation

if TYPE_CHECKING:
    from ..context import RuleContext

_MS_PER_HOUR = 3_600_000


class DroppedMessagesRule:
    """Messages dropped more often than the profile allows per hour."""

    name = "dropped_messages"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        threshold = context.limits.dropped_messages_per_hour_threshold
        nodes = set(context.hit_budget(sig.DROPPED_MESSAGES))
        types: set[str] = set()
        for node, entries in context.log_matches(sig.DROPPED_MESSAGES).items():
            dropped = sum(e.value.total for e in entries)
            if entries and dropped / context.log_hours(node) > threshold:
                nodes.add(node)
                types.update(e.value.message_type for e in entries)

        if not nodes:
            return []
        detail = f" ({', '.join(sorted(types))})" if types else ""
        return [
            Recommendation.immediate(
                Category.OPERATIONS,
                f"Nodes are dropping more than {threshold} messages per hour{detail}. We recommend "
                "investigating the load on these nodes and the cause of the dropped messages.",
                nodes,
            )
        ]


class GCPauseRule:
    """Garbage collection pauses over one second."""

    name = "gc_pauses"

    long_pause_ms = 1000

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        nodes = []
        longest = 0
        for node, entries in context.log_matches(sig.GC_PAUSE).items():
            pauses = [e.value.duration_ms for e in entries if e.value.duration_ms > self.long_pause_ms]
            if pauses:
                nodes.append(node)
                longest = max(longest, max(pauses))

        if not nodes:
            return []
        return [
            Recommendation.immediate(
                Category.INFRASTRUCTURE,
                f"Garbage collection pauses of more than one second were logged, up to {longest} ms. "
                "We recommend reviewing the JVM heap and garbage collector settings.",
                nodes,
            )
        ]


class GossipPauseRule:
    """Share of time nodes spent in local pauses noticed by gossip."""

    name = "gossip_pauses"

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        threshold = context.limits.gossip_pause_time_percentage_threshold
        nodes = set(context.hit_budget(sig.GOSSIP_PAUSE))
        for node, entries in context.log_matches(sig.GOSSIP_PAUSE).items():
            paused_ms = sum(e.value.pause_ms for e in entries)
            percentage = paused_ms / (context.log_hours(node) * _MS_PER_HOUR) * 100.0
            if entries and percentage > threshold:
                nodes.add(node)

        if not nodes:
            return []
        return [
            Recommendation.near(
                Category.OPERATIONS,
                f"Nodes spent more than {threshold:g}% of the time in local pauses. We recommend "
                "investigating long GC pauses and CPU or disk saturation on these nodes.",
                nodes,
            )
        ]


class CommitLogSyncRule:
    """Frequent commit log sync stalls."""

    name = "commit_log_sync"

    max_warnings = 100

    def evaluate(self, context: RuleContext) -> list[Recommendation]:
        nodes = [
            node
            for node, entries in context.log_matches(sig.COMMIT_LOG_SYNC).items()
            if sum(1 for e in entries if e.value.exceeded > 0) > self.max_warnings
        ]
        if not nodes:
            return []
        return [
            Recommendation.near(
                Category.OPERATIONS,
                f"More than {self.max_warnings} commit log sync stalls were logged. We recommend "
                "checking the latency of the commit log disk.",
                nodes,
            )
        ]
