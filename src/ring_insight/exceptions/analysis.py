"""Analysis-related exceptions: artifacts, empty input, rule failures."""

from typing import Optional

from .base import RingInsightError
from .taxonomy import ErrorCode


class AnalysisError(RingInsightError):
    """Base class for analysis-related errors."""
    pass


class ArtifactError(AnalysisError):
    """Raised when a node artifact cannot be turned into its typed form."""

    code = ErrorCode.RI101

    def __init__(self, node: str, artifact: str, reason: str):
        super().__init__(
            f"Cannot load {artifact} for node {node}",
            details={"node": node, "artifact": artifact, "reason": reason},
            node=node,
        )
        self.artifact = artifact
        self.reason = reason


class EmptyClusterError(AnalysisError):
    """Raised when there are no nodes to analyze.

    This is the only fatal condition of an analysis run: an empty report must
    never be mistaken for a healthy cluster.
    """

    def __init__(self, reason: str = "no node artifacts were supplied"):
        super().__init__(f"Empty cluster: {reason}", details={"reason": reason})
        self.reason = reason


class ExtractionError(AnalysisError):
    """Raised by a signature extractor when a matching line carries a malformed value."""

    code = ErrorCode.RI500

    def __init__(self, signature_id: str, line: str, reason: Optional[str] = None):
        details = {"signature": signature_id}
        if reason:
            details["reason"] = reason
        super().__init__(f"Cannot extract {signature_id} value from: {line[:120]}", details=details)
        self.signature_id = signature_id
        self.line = line
        self.reason = reason
