"""Display helpers for counts and byte quantities.

These produce strings for reports only; comparisons always use the raw
numbers.
"""

from __future__ import annotations

import math
import re

_COUNT_SUFFIXES = "KMBT"
_SI_BYTE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB")

_HUMAN_BYTES = re.compile(r"([\d. ]+)([EPTGMKk])(i?B)")
_POWERS = {"E": 6, "P": 5, "T": 4, "G": 3, "M": 2, "K": 1, "k": 1}


def human_count(count: float) -> str:
    """Render a count with an SI magnitude suffix ("1234" -> "1.2 K")."""
    count = int(count)
    if abs(count) < 1000:
        return str(count)
    exp = min(int(math.log(abs(count), 1000)), len(_COUNT_SUFFIXES))
    return f"{count / 1000 ** exp:.1f} {_COUNT_SUFFIXES[exp - 1]}"


def human_bytes(num_bytes: float) -> str:
    """Render a byte quantity in SI units ("1500000" -> "1.5 MB")."""
    num_bytes = int(num_bytes)
    if num_bytes < 1000:
        return f"{num_bytes} B"
    exp = min(int(math.log(num_bytes, 1000)), len(_SI_BYTE_UNITS) - 1)
    value = round(num_bytes / 1000 ** exp, 2)
    return f"{value:g} {_SI_BYTE_UNITS[exp]}"


def parse_human_bytes(text: str) -> int:
    """
    Parse a size such as "105.1MiB" or "2 GB" into bytes.

    "B" suffixes are decimal (base 1000), "iB" suffixes binary (base 1024).

    Returns:
        Number of bytes, or -1 when the text is not a recognizable size
    """
    match = _HUMAN_BYTES.fullmatch(text.strip())
    if match is None:
        return -1
    try:
        number = float(match.group(1).replace(" ", ""))
    except ValueError:
        return -1
    base = 1024 if match.group(3) == "iB" else 1000
    return int(number * base ** _POWERS[match.group(2)])
