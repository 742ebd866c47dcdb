"""Error taxonomy with error codes for degraded-input reporting.

Error Code Convention:
    RI1xx - Artifact errors
    RI2xx - Version resolution
    RI3xx - Release lookup
    RI4xx - Execution profile
    RI5xx - Log search
    RI6xx - Rule evaluation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes attached to load errors and rule failures."""

    # Artifact errors (RI1xx)
    RI100 = "RI100"  # Artifact missing
    RI101 = "RI101"  # Artifact unparsable
    RI102 = "RI102"  # Node name could not be determined
    RI103 = "RI103"  # Node folder count differs from status rows
    RI104 = "RI104"  # Nodes reported down

    # Version errors (RI2xx)
    RI200 = "RI200"  # Release string unrecognized, newest line assumed
    RI201 = "RI201"  # Release string missing

    # Release lookup errors (RI3xx)
    RI300 = "RI300"  # Latest release lookup failed

    # Profile errors (RI4xx)
    RI400 = "RI400"  # Execution profile override unreadable

    # Log errors (RI5xx)
    RI500 = "RI500"  # Log line unparsable

    # Rule errors (RI6xx)
    RI600 = "RI600"  # Rule evaluator failed
    RI601 = "RI601"  # Analysis timed out, partial results


@dataclass
class RingError(Exception):
    """Base exception with structured context for logging.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (node, rule, artifact)
        recoverable: Whether analysis can continue
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
        }


class RuleError(RingError):
    """Errors raised while evaluating a recommendation rule (RI6xx)."""

    pass
