"""Recommendation aggregator: append-only, deduplicated at insertion."""

from __future__ import annotations

import threading
from typing import Iterable

from ..logging_config import get_logger
from .models import Category, Priority, Recommendation

logger = get_logger(__name__)


class RecommendationAggregator:
    """Collects recommendations from rule evaluators.

    A recommendation whose (category, nodes, finding) was already added is
    dropped; the first one keeps its priority. ``all()`` returns insertion
    order. Safe to share between threads.
    """

    def __init__(self) -> None:
        self._items: list[Recommendation] = []
        self._keys: set[tuple[Category, frozenset[str], str]] = set()
        self._lock = threading.Lock()

    def add(self, recommendation: Recommendation) -> bool:
        """Add ``recommendation``; returns False when it was a duplicate."""
        with self._lock:
            if recommendation.key in self._keys:
                logger.debug(f"Duplicate recommendation dropped: {recommendation.finding[:80]}")
                return False
            self._keys.add(recommendation.key)
            self._items.append(recommendation)
            return True

    def extend(self, recommendations: Iterable[Recommendation]) -> int:
        """Add several recommendations; returns how many were kept."""
        return sum(1 for r in recommendations if self.add(r))

    def all(self) -> list[Recommendation]:
        with self._lock:
            return list(self._items)

    def count_by_priority(self) -> dict[Priority, int]:
        counts = {priority: 0 for priority in Priority}
        for recommendation in self.all():
            counts[recommendation.priority] += 1
        return counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
