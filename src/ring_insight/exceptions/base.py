"""Base exception for Ring Insight.

Most failures during an analysis run degrade a single node or artifact
rather than stopping the run. Such errors carry a load-error ``code`` and
the ``node`` they concern, and ``record`` turns them into an entry of the
run's load-error collection. Errors without a code are fatal.
"""

from typing import Dict, Optional, Protocol

from .taxonomy import ErrorCode

# Node identifier for errors that concern the whole run
RUN_WIDE = "ALL"


class _LoadErrorSink(Protocol):
    def add(self, node: str, reason: str, code: ErrorCode): ...


class RingInsightError(Exception):
    """Base exception for all Ring Insight errors."""

    #: Load-error code used when the run continues past this error
    code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        node: str = RUN_WIDE,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.node = node

    @property
    def recoverable(self) -> bool:
        return self.code is not None

    @property
    def load_reason(self) -> str:
        """Text of the load error: the message plus the underlying reason, if any."""
        reason = self.details.get("reason")
        return f"{self.message}: {reason}" if reason else self.message

    def record(self, load_errors: _LoadErrorSink):
        """Add this error to ``load_errors`` under its node and code."""
        if self.code is None:
            raise ValueError(f"{type(self).__name__} is fatal and cannot be recorded as a load error")
        return load_errors.add(self.node, self.load_reason, self.code)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message
