"""Tests for metric samples and summaries."""

import pytest

from ring_insight.metrics import MetricSampleList, summarize


class TestSummarize:
    """Cross-node summary statistics."""

    def test_known_values(self):
        """Population variance, not sample variance."""
        summary = summarize(MetricSampleList.from_mapping({"a": 1, "b": 2, "c": 3, "d": 4}))
        assert summary.count == 4
        assert summary.min == 1.0
        assert summary.max == 4.0
        assert summary.mean == pytest.approx(2.5)
        assert summary.sum == pytest.approx(10.0)
        assert summary.variance == pytest.approx(1.25)
        assert summary.stdev == pytest.approx(1.25 ** 0.5)

    def test_empty_is_no_value(self):
        """Empty input yields None, not zero."""
        summary = summarize(MetricSampleList("ReadLatency"))
        assert summary.is_empty
        assert summary.min is None
        assert summary.max is None
        assert summary.mean is None
        assert summary.sum is None
        assert summary.variance is None
        assert summary.stdev is None

    def test_single_sample(self):
        """One sample has zero variance."""
        summary = summarize(MetricSampleList.from_mapping({"a": 7.5}))
        assert summary.min == summary.max == summary.mean == 7.5
        assert summary.variance == 0.0

    @pytest.mark.parametrize(
        "values",
        [
            [0.1] * 7,
            [1e150, 1e150],
            [-5.0, 0.0, 5.0],
            [1e-12, 3e-12, 2e-12],
            [123456789.123, 123456789.124, 123456789.125],
        ],
    )
    def test_mean_within_bounds(self, values):
        """min <= mean <= max and variance >= 0."""
        samples = MetricSampleList.from_mapping({f"n{i}": v for i, v in enumerate(values)})
        summary = summarize(samples)
        assert summary.min <= summary.mean <= summary.max
        assert summary.variance >= 0.0


class TestMetricSampleList:
    """Node-keyed samples."""

    def test_value_for_missing_node_uses_default(self):
        """A missing node returns the caller's default."""
        samples = MetricSampleList.from_mapping({"a": 1.0})
        assert samples.value_for_node("a") == 1.0
        assert samples.value_for_node("b") is None
        assert samples.value_for_node("b", -1.0) == -1.0

    def test_duplicate_node_rejected(self):
        """Node names are unique."""
        samples = MetricSampleList("load")
        samples.add("a", 1.0)
        with pytest.raises(ValueError):
            samples.add("a", 2.0)

    def test_accessors(self):
        """Convenience accessors delegate to summarize."""
        samples = MetricSampleList.from_mapping({"a": 2.0, "b": 6.0}, metric="m", scope="ks.tbl")
        assert samples.min() == 2.0
        assert samples.max() == 6.0
        assert samples.average() == 4.0
        assert samples.sum() == 8.0
        assert samples.variance() == 4.0
        assert samples.nodes() == ["a", "b"]
        assert "a" in samples and "c" not in samples
        assert len(samples) == 2
        assert samples.scope == "ks.tbl"
