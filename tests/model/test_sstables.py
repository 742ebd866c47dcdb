"""Tests for SSTable statistics parsing."""

from ring_insight.model import (
    SSTableStatistic,
    SSTableStatistics,
    parse_statistics_dump,
    table_identity_from_path,
)

STATS_PATH = "/var/lib/cassandra/data/keyspace1/table2-uuidABCD/bb-1-bti-Statistics.db"

DUMP = """\
SSTable: /var/lib/cassandra/data/keyspace1/table2-uuidABCD/bb-1-bti
Partitioner: org.apache.cassandra.dht.Murmur3Partitioner
Repaired at: 1674000000000
totalColumnsSet: 1200
totalRows: 400
"""


class TestTableIdentity:
    def test_identity_from_path(self):
        """keyspace and table come from the two parent folders."""
        assert table_identity_from_path(STATS_PATH) == "keyspace1.table2"

    def test_table_without_uuid(self):
        path = "/data/ks/tbl/mc-3-big-Statistics.db"
        assert table_identity_from_path(path) == "ks.tbl"


class TestParseStatisticsDump:
    def test_rows_and_repair_state(self):
        stat = parse_statistics_dump(STATS_PATH, DUMP)
        assert stat.table == "keyspace1.table2"
        assert stat.keyspace == "keyspace1"
        assert stat.rows == 400
        assert stat.repaired is True

    def test_unrepaired(self):
        stat = parse_statistics_dump(STATS_PATH, DUMP.replace("1674000000000", "0"))
        assert stat.repaired is False

    def test_unreadable_dump(self):
        """Garbage values yield zero rows, not repaired."""
        stat = parse_statistics_dump(STATS_PATH, "totalRows: many\n")
        assert stat.rows == 0
        assert stat.repaired is False


class TestSSTableStatistics:
    def test_aggregates(self):
        stats = SSTableStatistics(
            [
                SSTableStatistic("ks.a", 10, True),
                SSTableStatistic("ks.a", 5, False),
                SSTableStatistic("ks.b", 7, False),
            ]
        )
        assert stats.tables() == ["ks.a", "ks.b"]
        assert stats.rows_by_table() == {"ks.a": 15, "ks.b": 7}
        assert stats.repaired_fraction_by_table() == {"ks.a": 0.5, "ks.b": 0.0}
        assert stats.has_incremental_repair()

    def test_empty(self):
        assert not SSTableStatistics().has_incremental_repair()
        assert len(SSTableStatistics()) == 0
