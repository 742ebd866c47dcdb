"""Tests for the shared load-error collection."""

from concurrent.futures import ThreadPoolExecutor

from ring_insight.exceptions.taxonomy import ErrorCode
from ring_insight.load_errors import ALL_NODES, LoadError, LoadErrorLog


class TestLoadErrorLog:
    def test_insertion_order(self):
        log = LoadErrorLog()
        log.add("n1", "ring missing", ErrorCode.RI100)
        log.add(ALL_NODES, "profile unreadable", ErrorCode.RI400)
        assert [e.node for e in log.all()] == ["n1", ALL_NODES]
        assert len(log) == 2
        assert log

    def test_empty_is_falsy(self):
        log = LoadErrorLog()
        assert not log
        assert log.first() is None

    def test_filters(self):
        log = LoadErrorLog()
        log.add("n1", "a", ErrorCode.RI100)
        log.add("n2", "b", ErrorCode.RI101)
        log.add("n1", "c", ErrorCode.RI101)
        assert [e.reason for e in log.for_node("n1")] == ["a", "c"]
        assert [e.reason for e in log.with_code(ErrorCode.RI101)] == ["b", "c"]
        assert log.first(ErrorCode.RI101).reason == "b"

    def test_snapshot_is_a_copy(self):
        log = LoadErrorLog()
        snapshot = log.all()
        log.add("n1", "late")
        assert snapshot == []

    def test_concurrent_adds(self):
        log = LoadErrorLog()
        with ThreadPoolExecutor(max_workers=8) as executor:
            for i in range(200):
                executor.submit(log.add, f"n{i}", "bad")
        assert len(log) == 200

    def test_str(self):
        error = LoadError("n1", "ring missing", ErrorCode.RI100)
        assert str(error) == "[RI100] n1: ring missing"
