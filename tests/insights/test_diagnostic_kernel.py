"""Tests for the diagnostic kernel."""

import threading

import pytest

from ring_insight.config import AnalysisConfig
from ring_insight.exceptions import EmptyClusterError
from ring_insight.exceptions.taxonomy import ErrorCode
from ring_insight.insights import Category, DiagnosticKernel, Priority, Recommendation
from ring_insight.insights.rules import MixedVersionRule

NO_LOOKUP = AnalysisConfig(enable_release_lookup=False, workers=2)


class _FailingRule:
    name = "always_fails"

    def evaluate(self, context):
        raise RuntimeError("boom")


class _StaticRule:
    def __init__(self, name, finding):
        self.name = name
        self.finding = finding

    def evaluate(self, context):
        return [Recommendation.near(Category.OPERATIONS, self.finding)]


class _BlockingRule:
    name = "blocking"

    def __init__(self):
        self.release = threading.Event()

    def evaluate(self, context):
        self.release.wait(5)
        return [Recommendation.near(Category.OPERATIONS, "too late")]


class _RecordingRule:
    name = "recording"

    def __init__(self):
        self.calls = 0

    def evaluate(self, context):
        self.calls += 1
        return [Recommendation.near(Category.OPERATIONS, "recorded")]


def _codes(result):
    return [e.code for e in result.load_errors]


class TestDiagnosticKernel:
    def test_empty_input_is_fatal(self):
        with pytest.raises(EmptyClusterError):
            DiagnosticKernel([], config=NO_LOOKUP).run()

    def test_healthy_run(self, node_bundle):
        result = DiagnosticKernel([node_bundle("a", "4.1.4"), node_bundle("b", "4.1.4")], config=NO_LOOKUP).run()
        assert result.complete
        assert result.recommendations == []
        assert result.load_errors == []
        assert len(result.cluster) == 2

    def test_progress_reported(self, node_bundle):
        messages = []
        DiagnosticKernel([node_bundle("a")], config=NO_LOOKUP).run(on_progress=messages.append)
        assert messages[0].startswith("Assembling 1 nodes")
        assert any(m.startswith("Running ") for m in messages)

    def test_failing_rule_recorded(self, node_bundle):
        """A failing rule becomes an RI600 load error; later rules still run."""
        rules = [_FailingRule(), _StaticRule("static", "still here")]
        result = DiagnosticKernel([node_bundle("a")], config=NO_LOOKUP, rules=rules).run()
        assert [r.finding for r in result.recommendations] == ["still here"]
        failure = next(e for e in result.load_errors if e.code == ErrorCode.RI600)
        assert "always_fails" in failure.reason
        assert failure.node == "ALL"

    def test_duplicates_across_rules(self, node_bundle):
        rules = [_StaticRule("one", "same"), _StaticRule("two", "same")]
        result = DiagnosticKernel([node_bundle("a")], config=NO_LOOKUP, rules=rules).run()
        assert len(result.recommendations) == 1

    def test_timeout_keeps_partial_results(self, node_bundle):
        blocking = _BlockingRule()
        config = AnalysisConfig(enable_release_lookup=False, analysis_timeout_seconds=0.5)
        rules = [_StaticRule("fast", "early finding"), blocking]
        try:
            result = DiagnosticKernel([node_bundle("a")], config=config, rules=rules).run()
        finally:
            blocking.release.set()
        assert not result.complete
        assert ErrorCode.RI601 in _codes(result)
        assert [r.finding for r in result.recommendations] == ["early finding"]

    def test_late_rule_never_reaches_result(self, node_bundle):
        """After the deadline the worker is a daemon, its output is dropped and later rules never run."""
        blocking = _BlockingRule()
        after = _RecordingRule()
        config = AnalysisConfig(enable_release_lookup=False, analysis_timeout_seconds=0.3)
        before = set(threading.enumerate())
        result = DiagnosticKernel([node_bundle("a")], config=config, rules=[blocking, after]).run()

        worker = next(
            t for t in threading.enumerate() if t.name == "ring-insight-analysis" and t not in before
        )
        assert worker.daemon
        errors_at_return = list(result.load_errors)

        blocking.release.set()
        worker.join(5)
        assert not worker.is_alive()
        assert result.recommendations == []
        assert result.load_errors == errors_at_return
        assert after.calls == 0

    def test_metric_summaries(self, node_bundle):
        bundles = [
            node_bundle("a", metrics={"MaxPartitionSize": {"ks.t": 10.0}}),
            node_bundle("b", metrics={"MaxPartitionSize": {"ks.t": 30.0}}),
        ]
        result = DiagnosticKernel(bundles, config=NO_LOOKUP, rules=[]).run()
        summary = result.summary_for("MaxPartitionSize", "ks.t")
        assert summary is not None
        assert result.summary_for("MaxPartitionSize") is None

    def test_log_findings_for_every_signature(self, node_bundle, log_line):
        logs = [log_line("ParNew GC in 1500ms.", level="INFO", source="GCInspector.java:284")]
        result = DiagnosticKernel([node_bundle("a", logs=logs)], config=NO_LOOKUP, rules=[]).run()
        assert len(result.log_findings["gc_pause"]) == 1
        assert result.log_findings["large_batch"] == []


class TestReleaseLookup:
    NOTES = "# Release notes for 5.1.35\n\n* fixes\n\n# Release notes for 5.1.34\n"

    def test_patch_recommendation(self, node_bundle, fake_notes):
        source = fake_notes(self.NOTES)
        config = AnalysisConfig(workers=2)
        result = DiagnosticKernel(
            [node_bundle("a", "5.1.20", managed=True)], config=config, release_source=source
        ).run()
        assert source.calls == ["DSE_5.1_Release_Notes.md"]
        assert result.release_lookups["5.1.20"].latest.release == "5.1.35"
        assert any("DSE 5.1.35" in r.finding for r in result.recommendations)

    def test_failed_lookup_is_advisory(self, node_bundle, fake_notes):
        source = fake_notes(error=ConnectionError("offline"))
        result = DiagnosticKernel(
            [node_bundle("a", "5.1.20", managed=True)], config=AnalysisConfig(workers=2), release_source=source
        ).run()
        assert result.complete
        assert ErrorCode.RI300 in _codes(result)
        assert not any("patch level" in r.finding for r in result.recommendations)


class TestLogDirScenario:
    """Three nodes, one logging elsewhere and one on an unknown release."""

    def test_findings(self, log_dir_bundles):
        result = DiagnosticKernel(log_dir_bundles, config=NO_LOOKUP).run()

        assert ErrorCode.RI200 in _codes(result)
        assert "log_dir" in result.inconsistent_settings()

        mixed = [r for r in result.recommendations if "single version" in r.finding]
        assert len(mixed) == 1
        assert mixed[0].priority is Priority.IMMEDIATE
        assert mixed[0].nodes == frozenset({"node_a", "node_b", "node_c"})

        drift = [r for r in result.recommendations if "log_dir" in r.finding]
        assert drift and drift[0].category is Category.CONFIGURATION

    def test_mixed_rule_alone(self, log_dir_bundles):
        result = DiagnosticKernel(log_dir_bundles, config=NO_LOOKUP, rules=[MixedVersionRule()]).run()
        assert len(result.recommendations) == 1
