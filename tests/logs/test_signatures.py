"""Tests for version-aware log signatures."""

import pytest

from ring_insight.exceptions import ExtractionError
from ring_insight.logs import LogEntry, signature_for
from ring_insight.logs import signatures as sig
from ring_insight.logs.messages import GCAlgorithm
from ring_insight.versions import resolve


def _entry(text):
    return LogEntry("node1", None, text, "WARN", text)


def _extract(signature_id, release, text, managed=False):
    signature = signature_for(signature_id, resolve(release, managed))
    entry = _entry(text)
    assert signature.matches(entry)
    return signature.extract(entry)


class TestLargePartitions:
    """Three formats across release lines."""

    def test_row_format(self):
        value = _extract(
            sig.LARGE_PARTITION, "1.2.19", "Compacting large row ks/tbl:key1 (123456789 bytes) incrementally"
        )
        assert value.size_bytes == 123456789
        assert value.table == "ks.tbl"

    def test_bytes_format(self):
        value = _extract(
            sig.LARGE_PARTITION, "2.1.20", "Compacting large partition ks/tbl:key1 (123456789 bytes)"
        )
        assert value.size_bytes == 123456789

    def test_human_format(self):
        value = _extract(
            sig.LARGE_PARTITION, "3.11.14", "Writing large partition ks/tbl:key1 (105.1MiB) to sstable"
        )
        assert value.size_bytes == int(105.1 * 1024 ** 2)
        assert value.partition == "ks/tbl:key1"

    def test_threshold_from_descriptor(self):
        """Partitions under the line's threshold do not count."""
        signature = signature_for(sig.LARGE_PARTITION, resolve("3.11.14"))
        small = _extract(sig.LARGE_PARTITION, "3.11.14", "Writing large partition ks/tbl:k (10MiB)")
        big = _extract(sig.LARGE_PARTITION, "3.11.14", "Writing large partition ks/tbl:k (1GiB)")
        assert not signature.passes_threshold(small)
        assert signature.passes_threshold(big)


class TestTombstones:
    def test_community_wording(self):
        value = _extract(
            sig.TOMBSTONE_WARNING,
            "3.11.14",
            "Read 10 live rows and 5000 tombstone cells for query SELECT * FROM ks.tbl WHERE id = 1 LIMIT 100",
        )
        assert (value.live_rows, value.tombstones, value.table) == (10, 5000, "ks.tbl")

    def test_managed_wording(self):
        value = _extract(
            sig.TOMBSTONE_WARNING,
            "6.8.20",
            "Scanned over 1001 tombstone rows for query SELECT * FROM ks.tbl LIMIT 5000 - more than the warning threshold 1000",
            managed=True,
        )
        assert (value.live_rows, value.tombstones, value.table) == (-1, 1001, "ks.tbl")


class TestOtherSignatures:
    def test_batch_human_size(self):
        value = _extract(
            sig.LARGE_BATCH,
            "3.11.14",
            "BatchStatement.java:287 - Batch for [ks.a, ks.b] is of size 12.3KiB, exceeding specified threshold of 5.000KiB by 7.3KiB.",
        )
        assert value.size_bytes == int(12.3 * 1024)
        assert value.tables == ("ks.a", "ks.b")

    def test_batch_plain_bytes(self):
        value = _extract(
            sig.LARGE_BATCH,
            "2.1.20",
            "BatchStatement.java:267 - Batch of prepared statements for [ks.a] is of size 7000, exceeding specified threshold of 5120 by 1880.",
        )
        assert value.size_bytes == 7000

    @pytest.mark.parametrize(
        "text,algorithm,duration",
        [
            ("ParNew GC in 250ms.  CMS Old Gen: 1 -> 2", GCAlgorithm.PARNEW, 250),
            ("ConcurrentMarkSweep GC in 1500ms.  CMS Old Gen: 1 -> 2", GCAlgorithm.CMS, 1500),
            ("GC for ParNew: 300 ms for 1 collections", GCAlgorithm.PARNEW, 300),
            ("G1 Young Generation GC in 450ms.  G1 Eden Space: 1 -> 0", GCAlgorithm.UNKNOWN, 450),
        ],
    )
    def test_gc_pauses(self, text, algorithm, duration):
        value = _extract(sig.GC_PAUSE, "3.11.14", text)
        assert value.algorithm is algorithm
        assert value.duration_ms == duration

    def test_dropped_messages(self):
        value = _extract(
            sig.DROPPED_MESSAGES,
            "3.11.14",
            "MUTATION messages were dropped in last 5000 ms: 10 internal and 5 cross node. "
            "Mean internal dropped latency: 2000 ms",
        )
        assert value.message_type == "MUTATION"
        assert value.total == 15

    def test_gossip_pause_in_ms(self):
        """Pauses are logged in nanoseconds."""
        value = _extract(
            sig.GOSSIP_PAUSE,
            "3.11.14",
            "FailureDetector.java:288 - Not marking nodes down due to local pause of 6000000000 > 5000000000",
        )
        assert value.pause_ms == 6000

    def test_prepared_statements(self):
        value = _extract(
            sig.PREPARED_STATEMENTS_DISCARDED,
            "3.11.14",
            "42 prepared statements discarded in the last minute because cache limit reached (10 MB)",
        )
        assert value.count == 42

    def test_commit_log_sync(self):
        value = _extract(
            sig.COMMIT_LOG_SYNC,
            "3.11.14",
            "Out of 29 commit log syncs over the past 248.84s with average duration of 14.21ms, "
            "2 have exceeded the configured commit interval by an average of 66.39ms",
        )
        assert value.total_syncs == 29
        assert value.exceeded == 2

    def test_aggregation(self):
        value = _extract(
            sig.AGGREGATION_QUERY,
            "3.11.14",
            "Aggregation query used on multiple partition keys (IN restriction) (ks: ks1, tbl: t1)",
        )
        assert value.multiple_partitions
        assert value.table == "ks1.t1"


class TestMalformedValues:
    def test_extraction_error(self):
        """A matching line without a value raises ExtractionError."""
        signature = signature_for(sig.LARGE_PARTITION, resolve("3.11.14"))
        entry = _entry("Writing large partition with no size at all")
        assert signature.matches(entry)
        with pytest.raises(ExtractionError):
            signature.extract(entry)

    def test_unknown_signature(self):
        with pytest.raises(KeyError):
            signature_for("no_such_signature", resolve("3.11.14"))

    def test_known_signatures_resolve_everywhere(self):
        """Every known signature exists for every release line."""
        for release, managed in [("1.2.19", False), ("3.11.14", False), ("4.1.2", False), ("6.8.20", True)]:
            for signature_id in sig.KNOWN_SIGNATURES:
                assert signature_for(signature_id, resolve(release, managed)).signature_id == signature_id
