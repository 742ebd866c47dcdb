"""Log parsing, known signatures and the log search engine."""

from .entry import LogEntry, parse_log_line, parse_log_lines
from .search import LogSearchEngine
from .signatures import KNOWN_SIGNATURES, Severity, Signature, signature_for

__all__ = [
    "LogEntry",
    "parse_log_line",
    "parse_log_lines",
    "LogSearchEngine",
    "Signature",
    "Severity",
    "signature_for",
    "KNOWN_SIGNATURES",
]
