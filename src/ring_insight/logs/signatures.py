"""Known log signatures, resolved per release line.

The same logical event is logged with different wording and thresholds
across release lines, so a signature id such as ``"large_partition"`` is
turned into a concrete ``Signature`` by ``signature_for(id, descriptor)``.
A signature decides whether a line is an occurrence (``matches``) and what
value it carries (``extract``); the search engine knows nothing about
message formats.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Optional

from ..exceptions import ExtractionError
from ..metrics.formatting import parse_human_bytes
from ..versions import PartitionWarningFormat, VersionDescriptor, WarningDialect
from .entry import LogEntry
from .messages import (
    AggregationQuery,
    CommitLogSync,
    DroppedMessages,
    GCAlgorithm,
    GCPause,
    GossipPause,
    LargeBatch,
    LargePartition,
    PreparedStatementsDiscarded,
    TombstoneWarning,
)

TOMBSTONE_WARNING = "tombstone_warning"
LARGE_PARTITION = "large_partition"
LARGE_BATCH = "large_batch"
GC_PAUSE = "gc_pause"
DROPPED_MESSAGES = "dropped_messages"
GOSSIP_PAUSE = "gossip_pause"
PREPARED_STATEMENTS_DISCARDED = "prepared_statements_discarded"
COMMIT_LOG_SYNC = "commit_log_sync"
AGGREGATION_QUERY = "aggregation_query"


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Signature:
    """A known problem signature.

    Attributes:
        signature_id: Stable id shared by all release-line variants
        predicate: Cheap test on the entry text deciding candidacy
        extractor: Turns a candidate into its value; raises ExtractionError
            when the line carries a malformed value
        severity: How bad one occurrence is
        level: Required log level, or None for any
        threshold: Minimum measured value for an occurrence to count
        measure: Maps an extracted value to the number compared to threshold
    """

    signature_id: str
    predicate: Callable[[str], bool]
    extractor: Optional[Callable[[str], Any]] = None
    severity: Severity = Severity.WARNING
    level: Optional[str] = None
    threshold: Optional[float] = None
    measure: Optional[Callable[[Any], float]] = None

    def matches(self, entry: LogEntry) -> bool:
        if self.level is not None and entry.level != self.level:
            return False
        return self.predicate(entry.text)

    def extract(self, entry: LogEntry) -> Any:
        if self.extractor is None:
            return None
        try:
            return self.extractor(entry.text)
        except ExtractionError:
            raise
        except (ValueError, IndexError, AttributeError) as e:
            raise ExtractionError(self.signature_id, entry.raw, str(e))

    def passes_threshold(self, value: Any) -> bool:
        if self.threshold is None or self.measure is None:
            return True
        return self.measure(value) >= self.threshold


def _contains_all(*terms: str) -> Callable[[str], bool]:
    return lambda text: all(term in text for term in terms)


def _search(pattern: re.Pattern, signature_id: str, text: str) -> re.Match:
    match = pattern.search(text)
    if match is None:
        raise ExtractionError(signature_id, text, "value not found")
    return match


# === Tombstones ===

_TOMBSTONES = re.compile(r"Read (\d+) live rows and (\d+) tombstone cells for query.*FROM (\S+)")
_MANAGED_TOMBSTONES = re.compile(r"Scanned over (\d+) tombstone rows for query.*FROM (\S+)")


def _tombstones(text: str) -> TombstoneWarning:
    m = _search(_TOMBSTONES, TOMBSTONE_WARNING, text)
    return TombstoneWarning(int(m.group(1)), int(m.group(2)), m.group(3))


def _managed_tombstones(text: str) -> TombstoneWarning:
    m = _search(_MANAGED_TOMBSTONES, TOMBSTONE_WARNING, text)
    return TombstoneWarning(-1, int(m.group(1)), m.group(2))


# === Large partitions ===

_PARTITION_KEY = r"([\w]+[\/]+[\w.]+:[\w:\-\/_]+)"
_LARGE_ROW = re.compile(r"large row " + _PARTITION_KEY + r" [\(]+([0-9]+) bytes[\)]+")
_LARGE_PARTITION_BYTES = re.compile(r"partition " + _PARTITION_KEY + r" [\(]+([0-9]+) bytes[\)]+")
_LARGE_PARTITION_HUMAN = re.compile(
    r"partition " + _PARTITION_KEY + r" [\(]+([0-9\.]+)([MGTP]iB)[\)]+"
)


def _large_partition_extractor(fmt: PartitionWarningFormat) -> Callable[[str], LargePartition]:
    if fmt is PartitionWarningFormat.HUMAN:

        def extract(text: str) -> LargePartition:
            m = _search(_LARGE_PARTITION_HUMAN, LARGE_PARTITION, text)
            size = parse_human_bytes(m.group(2) + m.group(3))
            if size < 0:
                raise ExtractionError(LARGE_PARTITION, text, f"bad size {m.group(2)}{m.group(3)}")
            return LargePartition(m.group(1), size)

        return extract

    pattern = _LARGE_ROW if fmt is PartitionWarningFormat.ROW else _LARGE_PARTITION_BYTES

    def extract_bytes(text: str) -> LargePartition:
        m = _search(pattern, LARGE_PARTITION, text)
        return LargePartition(m.group(1), int(m.group(2)))

    return extract_bytes


# === Batches ===

_BATCH_SIZE = re.compile(r"is of size ([\d.]+)\s*([EPTGMKk]i?B)?")
_BATCH_TABLES = re.compile(r"for \[(.*?)\]")


def _large_batch(text: str) -> LargeBatch:
    m = _search(_BATCH_SIZE, LARGE_BATCH, text)
    if m.group(2):
        size = parse_human_bytes(m.group(1) + m.group(2))
        if size < 0:
            raise ExtractionError(LARGE_BATCH, text, f"bad size {m.group(1)}{m.group(2)}")
    else:
        size = int(m.group(1))
    tables_match = _BATCH_TABLES.search(text)
    tables = tuple(t.strip() for t in tables_match.group(1).split(",")) if tables_match else ()
    return LargeBatch(size, tables)


# === GC pauses ===

_GC_IN = re.compile(r"([\w]*) GC in ([0-9]+)ms")
_G1 = re.compile(r"(\d+) ms")
_GC_FOR = re.compile(r"GC for (ConcurrentMarkSweep|ParNew|PS MarkSweep): (\d+) ms")

_GC_NAMES = {
    "ParNew": GCAlgorithm.PARNEW,
    "ConcurrentMarkSweep": GCAlgorithm.CMS,
    "PS MarkSweep": GCAlgorithm.PARALLEL,
}


def _is_gc_pause(text: str) -> bool:
    return " GC in " in text or "GC for " in text or ("G1" in text and " ms" in text)


def _gc_pause(text: str) -> GCPause:
    m = _GC_IN.search(text)
    if m:
        return GCPause(_GC_NAMES.get(m.group(1), GCAlgorithm.UNKNOWN), int(m.group(2)))
    m = _GC_FOR.search(text)
    if m:
        return GCPause(_GC_NAMES[m.group(1)], int(m.group(2)))
    m = _search(_G1, GC_PAUSE, text)
    return GCPause(GCAlgorithm.G1, int(m.group(1)))


# === Dropped messages ===

_DROPPED = re.compile(
    r"([A-Z_]+) messages were dropped in (?:last|the last) (\d+) (?:ms|s): (\d+) internal and (\d+) cross node"
)


def _dropped(text: str) -> DroppedMessages:
    m = _search(_DROPPED, DROPPED_MESSAGES, text)
    return DroppedMessages(m.group(1), int(m.group(3)), int(m.group(4)))


# === Gossip local pauses ===

_GOSSIP_PAUSE = re.compile(
    r"FailureDetector\.java:(\d+) - Not marking nodes down due to local pause of (\d+) > (\d+)"
)


def _gossip_pause(text: str) -> GossipPause:
    m = _search(_GOSSIP_PAUSE, GOSSIP_PAUSE, text)
    # logged in nanoseconds
    return GossipPause(int(m.group(2)) // 1_000_000)


# === Prepared statements ===

_PREPARED = re.compile(r"(\d+) prepared statements discarded")


def _prepared(text: str) -> PreparedStatementsDiscarded:
    m = _search(_PREPARED, PREPARED_STATEMENTS_DISCARDED, text)
    return PreparedStatementsDiscarded(int(m.group(1)))


# === Commit log sync ===

_NUM = r"(\d+\.\d+|\d+)"
_COMMIT_LOG_SYNC = re.compile(
    r"Out of (\d+) commit log syncs over the past " + _NUM + r"s with average duration of "
    + _NUM + r"ms, (\d+) have exceeded the configured commit interval by an average of "
    + _NUM + r"ms"
)


def _commit_log_sync(text: str) -> CommitLogSync:
    # "Infinityms" durations do not match and are skipped
    m = _search(_COMMIT_LOG_SYNC, COMMIT_LOG_SYNC, text)
    return CommitLogSync(
        int(m.group(1)), float(m.group(2)), float(m.group(3)), int(m.group(4)), float(m.group(5))
    )


# === Aggregation queries ===

_AGG_TABLE = re.compile(r"\(ks: (.*?), tbl: (.*?)\)")


def _aggregation(text: str) -> AggregationQuery:
    multiple = "on multiple partition keys" in text
    if not multiple and "without partition key" not in text:
        raise ExtractionError(AGGREGATION_QUERY, text, "unknown aggregation warning")
    m = _AGG_TABLE.search(text)
    table = f"{m.group(1)}.{m.group(2)}" if m else "unknown"
    return AggregationQuery(table, multiple)


@lru_cache(maxsize=512)
def signature_for(signature_id: str, descriptor: VersionDescriptor) -> Signature:
    """
    Concrete signature for a release line.

    Raises:
        KeyError: If ``signature_id`` is not a known signature
    """
    if signature_id == TOMBSTONE_WARNING:
        if descriptor.tombstone_dialect is WarningDialect.MANAGED:
            return Signature(
                TOMBSTONE_WARNING, _contains_all("Scanned", "tombstone"), _managed_tombstones,
                level="WARN",
            )
        return Signature(
            TOMBSTONE_WARNING, _contains_all("live", "tombstone"), _tombstones, level="WARN"
        )

    if signature_id == LARGE_PARTITION:
        fmt = descriptor.partition_warning_format
        noun = "row" if fmt is PartitionWarningFormat.ROW else "partition"
        return Signature(
            LARGE_PARTITION,
            _contains_all("large", noun),
            _large_partition_extractor(fmt),
            level="WARN",
            threshold=descriptor.large_partition_threshold_bytes,
            measure=lambda value: value.size_bytes,
        )

    if signature_id == LARGE_BATCH:
        if descriptor.batch_dialect is WarningDialect.MANAGED:
            predicate = _contains_all("Batch", "for", "is of size")
        else:
            predicate = _contains_all("BatchStatement.java")
        return Signature(
            LARGE_BATCH,
            predicate,
            _large_batch,
            level="WARN",
            threshold=descriptor.batch_size_warn_threshold_bytes,
            measure=lambda value: value.size_bytes,
        )

    if signature_id == GC_PAUSE:
        return Signature(GC_PAUSE, _is_gc_pause, _gc_pause, severity=Severity.INFO)

    if signature_id == DROPPED_MESSAGES:
        return Signature(DROPPED_MESSAGES, _contains_all("messages were dropped"), _dropped)

    if signature_id == GOSSIP_PAUSE:
        return Signature(
            GOSSIP_PAUSE, _contains_all("Not marking nodes down due to local pause"), _gossip_pause
        )

    if signature_id == PREPARED_STATEMENTS_DISCARDED:
        return Signature(
            PREPARED_STATEMENTS_DISCARDED,
            _contains_all("prepared statements discarded"),
            _prepared,
            level="WARN",
        )

    if signature_id == COMMIT_LOG_SYNC:
        return Signature(
            COMMIT_LOG_SYNC,
            _contains_all("commit log syncs over the past"),
            _commit_log_sync,
            severity=Severity.INFO,
        )

    if signature_id == AGGREGATION_QUERY:
        return Signature(
            AGGREGATION_QUERY, _contains_all("Aggregation query used"), _aggregation, level="WARN"
        )

    raise KeyError(f"Unknown log signature: {signature_id}")


KNOWN_SIGNATURES = (
    TOMBSTONE_WARNING,
    LARGE_PARTITION,
    LARGE_BATCH,
    GC_PAUSE,
    DROPPED_MESSAGES,
    GOSSIP_PAUSE,
    PREPARED_STATEMENTS_DISCARDED,
    COMMIT_LOG_SYNC,
    AGGREGATION_QUERY,
)
