"""SSTable statistics extracted from metadata dumps.

A metadata dump is the text printed by the SSTable metadata tool for one
``*-Statistics.db`` file. Parsing is a pure function of the file path and
the dump text.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Union

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SSTableStatistic:
    """Row count and repair state of one SSTable."""

    table: str  # "keyspace.table"
    rows: int
    repaired: bool
    path: str = ""

    @property
    def keyspace(self) -> str:
        return self.table.split(".", 1)[0]


def table_identity_from_path(path: Union[str, PurePath]) -> str:
    """``.../keyspace1/table2-uuidABCD/bb-1-bti-Statistics.db`` -> ``keyspace1.table2``."""
    p = PurePath(path)
    table = p.parent.name.split("-")[0]
    keyspace = p.parent.parent.name
    return f"{keyspace}.{table}"


def _field(lines: list[str], prefix: str) -> int:
    for line in lines:
        if line.startswith(prefix):
            return int(line.split(":", 1)[1].strip())
    return 0


def parse_statistics_dump(path: Union[str, PurePath], dump: str) -> SSTableStatistic:
    """
    Parse one metadata dump.

    Reads the ``totalRows:`` and ``Repaired at:`` lines; an SSTable is
    repaired when its repaired-at timestamp is positive. An unreadable dump
    yields zero rows and not repaired.

    Args:
        path: Location of the statistics file, used for the table identity
        dump: Text output of the metadata tool

    Returns:
        SSTableStatistic for the file
    """
    table = table_identity_from_path(path)
    lines = dump.splitlines()
    try:
        rows = _field(lines, "totalRows")
        repaired_at = _field(lines, "Repaired at")
    except ValueError as e:
        logger.debug(f"Unreadable metadata dump for {path}: {e}")
        return SSTableStatistic(table, 0, False, str(path))
    return SSTableStatistic(table, rows, repaired_at > 0, str(path))


class SSTableStatistics:
    """All SSTable statistics reported by one node."""

    def __init__(self, entries: Iterable[SSTableStatistic] = ()):
        self.entries: tuple[SSTableStatistic, ...] = tuple(entries)

    def tables(self) -> list[str]:
        return sorted({e.table for e in self.entries})

    def rows_by_table(self) -> dict[str, int]:
        rows: dict[str, int] = defaultdict(int)
        for entry in self.entries:
            rows[entry.table] += entry.rows
        return dict(rows)

    def repaired_fraction_by_table(self) -> dict[str, float]:
        """Share of each table's SSTables marked as incrementally repaired."""
        totals: dict[str, int] = defaultdict(int)
        repaired: dict[str, int] = defaultdict(int)
        for entry in self.entries:
            totals[entry.table] += 1
            if entry.repaired:
                repaired[entry.table] += 1
        return {table: repaired[table] / count for table, count in totals.items()}

    def has_incremental_repair(self) -> bool:
        return any(e.repaired for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
