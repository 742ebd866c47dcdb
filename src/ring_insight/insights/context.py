"""Shared, read-mostly state handed to every rule."""

from __future__ import annotations

import threading
from typing import Optional

from ..config import AnalysisConfig, Limits
from ..logs import signatures as sig
from ..logs.entry import LogEntry
from ..logs.search import LogSearchEngine
from ..model.cluster import ClusterSnapshot
from ..versions import ReleaseLookup

# Per-node budgets from the execution profile; other signatures use the
# analysis config's log_query_limit
SIGNATURE_BUDGETS = {
    sig.AGGREGATION_QUERY: "aggregation_warnings",
    sig.LARGE_BATCH: "batch_size_warnings",
    sig.DROPPED_MESSAGES: "dropped_messages",
    sig.GOSSIP_PAUSE: "gossip_pause_warnings",
    sig.PREPARED_STATEMENTS_DISCARDED: "prepared_statement_warnings",
}

# Rates are computed over at least one hour of logs
_MIN_LOG_HOURS = 1.0


class RuleContext:
    """Cluster snapshot plus lazily computed, cached log searches."""

    def __init__(
        self,
        cluster: ClusterSnapshot,
        config: Optional[AnalysisConfig] = None,
        release_lookups: Optional[dict[str, ReleaseLookup]] = None,
        engine: Optional[LogSearchEngine] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.cluster = cluster
        self.config = config or AnalysisConfig()
        self.release_lookups = release_lookups or {}
        self.cancel = cancel or threading.Event()
        self.engine = engine or LogSearchEngine(cluster, self.config.workers, cancel=self.cancel)
        self._log_cache: dict[str, dict[str, list[LogEntry]]] = {}
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """True once the analysis deadline passed; long rules may stop early."""
        return self.cancel.is_set()

    @property
    def limits(self) -> Limits:
        return self.cluster.profile.limits

    def budget(self, signature_id: str) -> int:
        field_name = SIGNATURE_BUDGETS.get(signature_id)
        if field_name is None:
            return self.config.log_query_limit
        return getattr(self.limits, field_name)

    def log_matches(self, signature_id: str) -> dict[str, list[LogEntry]]:
        """Node name -> matching entries, searched once per signature."""
        with self._lock:
            cached = self._log_cache.get(signature_id)
        if cached is not None:
            return cached
        found = self.engine.search_by_node(signature_id, self.budget(signature_id))
        with self._lock:
            return self._log_cache.setdefault(signature_id, found)

    def hit_budget(self, signature_id: str) -> list[str]:
        """Nodes whose search for ``signature_id`` stopped at the budget."""
        budget = self.budget(signature_id)
        return [node for node, entries in self.log_matches(signature_id).items() if len(entries) >= budget]

    def log_hours(self, node: str) -> float:
        """Hours of logs analysed for ``node``, at least one."""
        hours = self.cluster.log_durations_hours().get(node, 0.0)
        return max(hours, _MIN_LOG_HOURS)

    def release_lookup(self, release: str) -> Optional[ReleaseLookup]:
        return self.release_lookups.get(release)

