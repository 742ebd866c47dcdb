"""DiagnosticKernel: orchestrates assembly, aggregations and rules."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..config import AnalysisConfig, load_profile
from ..exceptions.taxonomy import ErrorCode, RuleError
from ..load_errors import ALL_NODES, LoadErrorLog
from ..logging_config import get_logger
from ..logs.search import LogSearchEngine
from ..logs.signatures import KNOWN_SIGNATURES
from ..metrics.aggregator import summaries_by_scope
from ..model.artifacts import NodeArtifacts
from ..model.assembly import assemble_cluster
from ..model.cluster import ClusterSnapshot
from ..model.consistency import consistency_verdicts
from ..versions import ReleaseNotesSource, latest_release
from .aggregator import RecommendationAggregator
from .context import RuleContext
from .models import DiagnosticResult
from .protocols import Rule
from .rules import get_default_rules

ProgressCallback = Optional[Callable[[str], None]]

logger = get_logger(__name__)


class _Cancelled(Exception):
    """Raised inside the worker once the caller stopped waiting."""


class _RunState:
    """Stop flag shared with the analysis worker.

    Every write into the result happens under ``lock`` after checking the
    flag, so nothing lands in the result once ``stop`` has returned.
    """

    def __init__(self):
        self.cancel = threading.Event()
        self.lock = threading.Lock()

    def stop(self) -> None:
        with self.lock:
            self.cancel.set()

    def checkpoint(self) -> None:
        if self.cancel.is_set():
            raise _Cancelled()

    def commit(self, write: Callable[[], object]) -> None:
        with self.lock:
            self.checkpoint()
            write()


class DiagnosticKernel:
    """Orchestrate analysis: assemble -> look up releases -> aggregate -> evaluate rules.

    Only an empty input is fatal. Every other problem (bad artifacts, failed
    lookups, failing rules, the overall timeout) is reported through the
    load-error collection of the result.
    """

    def __init__(
        self,
        bundles: Iterable[NodeArtifacts],
        config: Optional[AnalysisConfig] = None,
        profile_path: Optional[Path] = None,
        release_source: Optional[ReleaseNotesSource] = None,
        rules: Optional[list[Rule]] = None,
    ):
        self.bundles = list(bundles)
        self.config = config or AnalysisConfig()
        self.profile_path = profile_path
        self.release_source = release_source
        self._rules = rules if rules is not None else get_default_rules()

    def run(self, on_progress: ProgressCallback = None) -> DiagnosticResult:
        """Execute the full analysis.

        Parameters
        ----------
        on_progress : callable, optional
            Called with a status message at each phase transition.

        Returns
        -------
        DiagnosticResult
            ``complete`` is False when ``analysis_timeout_seconds`` elapsed;
            whatever was gathered until then is still returned.

        Raises
        ------
        EmptyClusterError
            If no node bundles were supplied.
        """

        def _progress(msg: str) -> None:
            if on_progress is not None:
                on_progress(msg)

        load_errors = LoadErrorLog()
        profile = load_profile(self.profile_path, load_errors)

        _progress(f"Assembling {len(self.bundles)} nodes...")
        cluster = assemble_cluster(self.bundles, profile, self.config.workers, load_errors)
        logger.info(f"Assembled {len(cluster)} nodes")

        result = DiagnosticResult(cluster=cluster, recommendations=[])
        aggregator = RecommendationAggregator()
        run = _RunState()

        timeout = self.config.analysis_timeout_seconds
        if timeout is None:
            self._analyze(cluster, result, aggregator, run, _progress)
        else:
            # Daemon worker: a stuck rule must not keep the process alive
            worker = threading.Thread(
                target=self._analyze,
                args=(cluster, result, aggregator, run, _progress),
                name="ring-insight-analysis",
                daemon=True,
            )
            worker.start()
            worker.join(timeout=timeout)
            if worker.is_alive():
                run.stop()
                result.complete = False
                load_errors.add(
                    ALL_NODES,
                    f"Analysis exceeded {timeout}s timeout, results are partial",
                    ErrorCode.RI601,
                )
                logger.warning(f"Analysis timed out after {timeout}s, returning partial results")

        with run.lock:
            result.recommendations = aggregator.all()
            result.metric_summaries = dict(result.metric_summaries)
            result.consistency = dict(result.consistency)
            result.log_findings = dict(result.log_findings)
            result.release_lookups = dict(result.release_lookups)
            result.load_errors = load_errors.all()
        return result

    def _analyze(
        self,
        cluster: ClusterSnapshot,
        result: DiagnosticResult,
        aggregator: RecommendationAggregator,
        run: _RunState,
        progress: Callable[[str], None],
    ) -> None:
        try:
            if self.config.enable_release_lookup:
                progress("Looking up latest releases...")
                self._lookup_releases(cluster, result, run)

            progress("Summarizing metrics...")
            for metric in sorted({name for node in cluster.nodes for name in node.metrics}):
                run.checkpoint()
                summaries = summaries_by_scope(cluster, metric)
                run.commit(lambda: result.metric_summaries.__setitem__(metric, summaries))

            progress("Checking configuration consistency...")
            verdicts = consistency_verdicts(cluster)
            run.commit(lambda: result.consistency.update(verdicts))

            context = RuleContext(
                cluster,
                config=self.config,
                release_lookups=dict(result.release_lookups),
                engine=LogSearchEngine(cluster, self.config.workers, cancel=run.cancel),
                cancel=run.cancel,
            )

            progress("Searching logs...")
            for signature_id in KNOWN_SIGNATURES:
                run.checkpoint()
                by_node = context.log_matches(signature_id)
                found = [e for entries in by_node.values() for e in entries]
                run.commit(lambda: result.log_findings.__setitem__(signature_id, found))

            for rule in self._rules:
                run.checkpoint()
                progress(f"Running {rule.name}...")
                self._evaluate(rule, context, aggregator, cluster.load_errors, run)
        except _Cancelled:
            logger.debug("Analysis cancelled after timeout")

    def _lookup_releases(self, cluster: ClusterSnapshot, result: DiagnosticResult, run: _RunState) -> None:
        timeout = self.config.release_lookup_timeout_seconds
        for release in cluster.distinct_releases():
            run.checkpoint()
            nodes = cluster.nodes_by_release()[release]
            descriptor = cluster.node(nodes[0]).version
            lookup = latest_release(descriptor, source=self.release_source, timeout=timeout)
            run.commit(lambda: result.release_lookups.__setitem__(release, lookup))
            if not lookup.confident:
                run.commit(
                    lambda: cluster.load_errors.add(
                        ALL_NODES,
                        f"Latest release of {release} unknown: {lookup.reason}",
                        ErrorCode.RI300,
                    )
                )

    @staticmethod
    def _evaluate(
        rule: Rule,
        context: RuleContext,
        aggregator: RecommendationAggregator,
        load_errors: LoadErrorLog,
        run: _RunState,
    ) -> None:
        try:
            recommendations = rule.evaluate(context)
        except Exception as e:
            error = RuleError(
                message=f"Rule {rule.name} failed: {e}",
                code=ErrorCode.RI600,
                context={"rule": rule.name, "exception": type(e).__name__},
            )
            logger.debug(f"Rule failure detail: {error.to_json()}")
            run.commit(lambda: load_errors.add(ALL_NODES, error.message, error.code))
            return
        kept: list[int] = []
        run.commit(lambda: kept.append(aggregator.extend(recommendations)))
        logger.debug(f"Rule {rule.name} produced {len(recommendations)} recommendations ({kept[0]} new)")
