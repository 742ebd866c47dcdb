"""Exception hierarchy for Ring Insight."""

from .analysis import (
    AnalysisError,
    ArtifactError,
    EmptyClusterError,
    ExtractionError,
)
from .base import RingInsightError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    ProfileLoadError,
)
from .taxonomy import ErrorCode, RingError, RuleError

__all__ = [
    "RingInsightError",
    "AnalysisError",
    "ArtifactError",
    "EmptyClusterError",
    "ExtractionError",
    "ConfigurationError",
    "InvalidConfigError",
    "ProfileLoadError",
    "ErrorCode",
    "RingError",
    "RuleError",
]
