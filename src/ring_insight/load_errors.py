"""Append-only collection of degraded-input reports.

Every missing or unparsable artifact, unresolved release string, failed
release lookup and failing rule ends up here as a ``LoadError`` instead of
an exception. The collection is shared between worker threads.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterator, Optional

from .exceptions.base import RUN_WIDE
from .exceptions.taxonomy import ErrorCode
from .logging_config import get_logger

logger = get_logger(__name__)

# Node identifier used for errors that concern the whole run
ALL_NODES = RUN_WIDE


@dataclass(frozen=True)
class LoadError:
    """One degraded-input report: which node, why, and a structured code."""

    node: str
    reason: str
    code: ErrorCode = ErrorCode.RI101

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.node}: {self.reason}"


class LoadErrorLog:
    """Thread-safe, append-only list of ``LoadError`` records."""

    def __init__(self) -> None:
        self._errors: list[LoadError] = []
        self._lock = threading.Lock()

    def add(self, node: str, reason: str, code: ErrorCode = ErrorCode.RI101) -> LoadError:
        error = LoadError(node=node, reason=reason, code=code)
        with self._lock:
            self._errors.append(error)
        logger.warning(str(error))
        return error

    def extend(self, errors: list[LoadError]) -> None:
        with self._lock:
            self._errors.extend(errors)

    def all(self) -> list[LoadError]:
        """Snapshot of the recorded errors in insertion order."""
        with self._lock:
            return list(self._errors)

    def for_node(self, node: str) -> list[LoadError]:
        return [e for e in self.all() if e.node == node]

    def with_code(self, code: ErrorCode) -> list[LoadError]:
        return [e for e in self.all() if e.code == code]

    def first(self, code: Optional[ErrorCode] = None) -> Optional[LoadError]:
        errors = self.all() if code is None else self.with_code(code)
        return errors[0] if errors else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def __iter__(self) -> Iterator[LoadError]:
        return iter(self.all())

    def __bool__(self) -> bool:
        return len(self) > 0
