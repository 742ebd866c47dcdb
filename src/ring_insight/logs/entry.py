"""Log entries and log line parsing.

Two layouts are understood:

    * the default logback layout
      ``WARN  [thread] 2023-01-15 10:00:00,123 File.java:42 - message``
    * the legacy layout, whose timestamp reads ``15 Jan 2023 10:00:00``

A line in neither layout is kept as a raw entry without timestamp or level.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

_DEFAULT_LAYOUT = re.compile(r"^\s*(\w+)\s*\[.*?]\s([^,]*),\d*(.*)", re.DOTALL)
_LEGACY_LAYOUT = re.compile(r"^([^,]*).*?(WARN|INFO|DEBUG|ERROR|FATAL|TRACE)(.*)", re.DOTALL)

_DEFAULT_DATE = "%Y-%m-%d %H:%M:%S"
_LEGACY_DATE = "%d %b %Y %H:%M:%S"


@dataclass(frozen=True)
class LogEntry:
    """One log line of one node.

    ``signature_id`` and ``value`` are filled in by the log search engine
    when the entry matches a signature.
    """

    node: str
    timestamp: Optional[datetime]
    raw: str
    level: str = ""
    message: str = ""
    signature_id: Optional[str] = None
    value: Any = None

    @property
    def text(self) -> str:
        """Message when the line was parsed, raw line otherwise."""
        return self.message or self.raw


def parse_log_line(line: str, node: str) -> Optional[LogEntry]:
    """
    Parse one raw log line.

    Args:
        line: Raw line from system.log
        node: Name of the node the line came from

    Returns:
        LogEntry, or None for a blank line
    """
    if not line.strip():
        return None
    raw = line.rstrip("\n")

    match = _DEFAULT_LAYOUT.match(raw)
    if match:
        timestamp = _parse_date(match.group(2).strip(), _DEFAULT_DATE)
        if timestamp is not None:
            return LogEntry(node, timestamp, raw, match.group(1), match.group(3).strip())

    match = _LEGACY_LAYOUT.match(raw)
    if match:
        timestamp = _parse_date(match.group(1).strip(), _LEGACY_DATE)
        if timestamp is not None:
            return LogEntry(node, timestamp, raw, match.group(2), match.group(3).strip())

    return LogEntry(node, None, raw)


def parse_log_lines(lines: Iterable[str], node: str) -> list[LogEntry]:
    entries = []
    for line in lines:
        entry = parse_log_line(line, node)
        if entry is not None:
            entries.append(entry)
    return entries


def _parse_date(text: str, fmt: str) -> Optional[datetime]:
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        return None
