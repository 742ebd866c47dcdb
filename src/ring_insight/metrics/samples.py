"""Per-node metric samples and their cross-node summary statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np


@dataclass(frozen=True)
class MetricSummary:
    """Summary of one metric across nodes.

    Every field is None when no node reported the metric; callers check
    ``is_empty`` before formatting.
    """

    count: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    sum: Optional[float] = None
    variance: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    @property
    def stdev(self) -> Optional[float]:
        if self.variance is None:
            return None
        return float(np.sqrt(self.variance))


class MetricSampleList:
    """Node name -> value for one metric at one scope.

    Node names are unique: adding a node twice is an error. Only nodes that
    reported the metric are present; nothing is imputed for the others.
    """

    def __init__(self, metric: str = "", scope: str = ""):
        self.metric = metric
        self.scope = scope
        self._samples: dict[str, float] = {}

    @classmethod
    def from_mapping(cls, samples: dict[str, float], metric: str = "", scope: str = "") -> MetricSampleList:
        result = cls(metric, scope)
        for node, value in samples.items():
            result.add(node, value)
        return result

    def add(self, node: str, value: float) -> None:
        if node in self._samples:
            raise ValueError(f"Duplicate sample for node {node} in {self.metric or 'metric'}")
        self._samples[node] = float(value)

    def value_for_node(self, node: str, default: Optional[float] = None) -> Optional[float]:
        """Value reported by ``node``, or ``default`` when it reported none."""
        return self._samples.get(node, default)

    def nodes(self) -> list[str]:
        return list(self._samples)

    def values(self) -> np.ndarray:
        return np.fromiter(self._samples.values(), dtype=np.float64, count=len(self._samples))

    def min(self) -> Optional[float]:
        return summarize(self).min

    def max(self) -> Optional[float]:
        return summarize(self).max

    def average(self) -> Optional[float]:
        return summarize(self).mean

    def sum(self) -> Optional[float]:
        return summarize(self).sum

    def variance(self) -> Optional[float]:
        return summarize(self).variance

    def items(self) -> Iterator[tuple[str, float]]:
        return iter(self._samples.items())

    def __contains__(self, node: object) -> bool:
        return node in self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[str]:
        return iter(self._samples)


def summarize(samples: MetricSampleList) -> MetricSummary:
    """
    Compute min, max, mean, sum and population variance in float64.

    Args:
        samples: Present samples only

    Returns:
        MetricSummary; all-None fields for an empty list
    """
    if len(samples) == 0:
        return MetricSummary(count=0)

    values = samples.values()
    lo = float(np.min(values))
    hi = float(np.max(values))
    # Rounding in the mean of near-equal values can step outside [min, max]
    mean = min(max(float(np.mean(values)), lo), hi)
    variance = max(float(np.var(values, ddof=0)), 0.0)

    return MetricSummary(
        count=len(values),
        min=lo,
        max=hi,
        mean=mean,
        sum=float(np.sum(values)),
        variance=variance,
    )
