"""
Ring Insight - Diagnostic analysis for Cassandra and DSE clusters

Turns per-node diagnostic artifacts (status and ring listings, gossip,
configuration, metrics, SSTable statistics and logs) into cross-node metric
summaries, configuration drift verdicts, known log signatures and a
deduplicated list of recommendations, judged against the behavior of each
node's software release.
"""

__version__ = "0.1.0"

from .config import AnalysisConfig, ExecutionProfile, Limits, load_config, load_profile
from .insights import DiagnosticKernel, DiagnosticResult, Recommendation
from .model import NodeArtifacts, assemble_cluster
from .versions import VersionDescriptor, resolve

__all__ = [
    "DiagnosticKernel",  # Main entry point
    "DiagnosticResult",
    "Recommendation",
    "NodeArtifacts",
    "assemble_cluster",  # Snapshot only, no rules
    "resolve",
    "VersionDescriptor",
    "AnalysisConfig",
    "ExecutionProfile",
    "Limits",
    "load_config",
    "load_profile",
]
