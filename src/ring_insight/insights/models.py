"""Data models for recommendations and analysis results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from ..load_errors import LoadError
    from ..logs.entry import LogEntry
    from ..metrics.samples import MetricSummary
    from ..model.cluster import ClusterSnapshot
    from ..model.consistency import ConsistencyVerdict
    from ..versions import ReleaseLookup


class Priority(Enum):
    """How soon a recommendation should be acted on. Lower value is more urgent."""

    IMMEDIATE = 1
    NEAR = 2
    LONG = 3


class Category(Enum):
    INFRASTRUCTURE = "infrastructure"
    CONFIGURATION = "configuration"
    DATAMODEL = "datamodel"
    OPERATIONS = "operations"
    SECURITY = "security"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Recommendation:
    category: Category
    priority: Priority
    nodes: frozenset[str]
    finding: str

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, frozenset):
            object.__setattr__(self, "nodes", frozenset(self.nodes))

    @property
    def key(self) -> tuple[Category, frozenset[str], str]:
        """Identity used for deduplication; priority is not part of it."""
        return self.category, self.nodes, self.finding

    @classmethod
    def immediate(cls, category: Category, finding: str, nodes: Iterable[str] = ()) -> Recommendation:
        return cls(category, Priority.IMMEDIATE, frozenset(nodes), finding)

    @classmethod
    def near(cls, category: Category, finding: str, nodes: Iterable[str] = ()) -> Recommendation:
        return cls(category, Priority.NEAR, frozenset(nodes), finding)

    @classmethod
    def long(cls, category: Category, finding: str, nodes: Iterable[str] = ()) -> Recommendation:
        return cls(category, Priority.LONG, frozenset(nodes), finding)


@dataclass
class DiagnosticResult:
    """Everything one analysis run produced.

    ``complete`` is False when the run hit its timeout; the recommendations
    gathered up to that point are still returned.
    """

    cluster: ClusterSnapshot
    recommendations: list[Recommendation]
    metric_summaries: dict[str, dict[str, MetricSummary]] = field(default_factory=dict)
    consistency: dict[str, ConsistencyVerdict] = field(default_factory=dict)
    log_findings: dict[str, list[LogEntry]] = field(default_factory=dict)
    release_lookups: dict[str, ReleaseLookup] = field(default_factory=dict)
    load_errors: list[LoadError] = field(default_factory=list)
    complete: bool = True

    def by_priority(self, priority: Priority) -> list[Recommendation]:
        return [r for r in self.recommendations if r.priority is priority]

    def inconsistent_settings(self) -> list[str]:
        return [name for name, verdict in self.consistency.items() if not verdict.consistent]

    def summary_for(self, metric: str, scope: str = "") -> Optional[MetricSummary]:
        return self.metric_summaries.get(metric, {}).get(scope)
