"""Log search engine: bounded, version-aware signature scans over all nodes."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import TYPE_CHECKING, Optional, Union

from ..exceptions import ExtractionError
from ..logging_config import get_logger
from .entry import LogEntry
from .signatures import Signature, signature_for

if TYPE_CHECKING:
    from ..model.cluster import ClusterSnapshot
    from ..model.node import NodeSnapshot

logger = get_logger(__name__)

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

SignatureRef = Union[str, Signature]


class LogSearchEngine:
    """Scan every node's log stream for a signature.

    Only entries inside each node's log window (``number_of_log_days`` of the
    cluster's execution profile, counted back from the node's newest entry)
    are searched. Nodes are scanned concurrently. Once ``cancel`` is set,
    nodes not yet scanned yield no matches and running scans stop early.
    """

    def __init__(
        self,
        cluster: ClusterSnapshot,
        max_workers: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.cluster = cluster
        self._max_workers = max_workers or _DEFAULT_WORKERS
        self._cancel = cancel or threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def search(self, signature: SignatureRef, per_node_limit: int) -> list[LogEntry]:
        """
        Find occurrences of ``signature`` on every node.

        Args:
            signature: Signature id, resolved through each node's release
                line, or a concrete Signature used as-is
            per_node_limit: Maximum matches returned for any single node

        Returns:
            Matching entries, in encounter order within each node. Order
            across nodes is unspecified.
        """
        results: list[LogEntry] = []
        for entries in self.search_by_node(signature, per_node_limit).values():
            results.extend(entries)
        return results

    def search_by_node(self, signature: SignatureRef, per_node_limit: int) -> dict[str, list[LogEntry]]:
        """Like ``search`` but keyed by node name; every node has a key."""
        nodes = list(self.cluster.nodes)
        by_node: dict[str, list[LogEntry]] = {node.name: [] for node in nodes}
        if per_node_limit <= 0 or not nodes or self.cancelled:
            return by_node

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(nodes))) as executor:
            futures = {
                executor.submit(self._scan_node, node, signature, per_node_limit): node.name
                for node in nodes
            }
            for future in as_completed(futures):
                by_node[futures[future]] = future.result()

        return by_node

    def _scan_node(self, node: NodeSnapshot, signature: SignatureRef, limit: int) -> list[LogEntry]:
        if self.cancelled:
            return []
        if isinstance(signature, str):
            signature = signature_for(signature, node.version)

        days = self.cluster.profile.limits.number_of_log_days
        matches: list[LogEntry] = []
        skipped = 0
        for entry in node.logs_within(days):
            if self.cancelled:
                break
            if not signature.matches(entry):
                continue
            try:
                value = signature.extract(entry)
            except ExtractionError as e:
                skipped += 1
                logger.debug(f"{node.name}: {e}")
                continue
            if not signature.passes_threshold(value):
                continue
            matches.append(replace(entry, signature_id=signature.signature_id, value=value))
            if len(matches) >= limit:
                break

        if skipped:
            logger.debug(
                f"{node.name}: skipped {skipped} malformed {signature.signature_id} lines"
            )
        return matches
