"""Values carried by known log messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class GCAlgorithm(Enum):
    PARNEW = "ParNew"
    CMS = "ConcurrentMarkSweep"
    G1 = "G1"
    PARALLEL = "PS MarkSweep"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TombstoneWarning:
    """Live rows and tombstones read by one query. ``live_rows`` is -1 when not logged."""

    live_rows: int
    tombstones: int
    table: str


@dataclass(frozen=True)
class LargePartition:
    partition: str  # "keyspace/table:key"
    size_bytes: int

    @property
    def table(self) -> str:
        return self.partition.split(":", 1)[0].replace("/", ".")


@dataclass(frozen=True)
class LargeBatch:
    size_bytes: int
    tables: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GCPause:
    algorithm: GCAlgorithm
    duration_ms: int


@dataclass(frozen=True)
class DroppedMessages:
    message_type: str
    internal: int
    cross_node: int

    @property
    def total(self) -> int:
        return self.internal + self.cross_node


@dataclass(frozen=True)
class GossipPause:
    pause_ms: int


@dataclass(frozen=True)
class PreparedStatementsDiscarded:
    count: int


@dataclass(frozen=True)
class CommitLogSync:
    total_syncs: int
    interval_seconds: float
    average_duration_ms: float
    exceeded: int
    average_exceeded_ms: float


@dataclass(frozen=True)
class AggregationQuery:
    table: str
    multiple_partitions: bool
