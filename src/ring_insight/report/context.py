"""Rendering state passed through formatters.

Section numbers used to live in a process-wide counter; they are now owned
by a RenderContext so that two reports (or two tests) never share numbering.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class SectionCounter:
    """Monotonic section numbering, starting at 1."""

    def __init__(self) -> None:
        self._value = 0

    def next(self) -> int:
        self._value += 1
        return self._value

    @property
    def current(self) -> int:
        return self._value

    def reset(self) -> None:
        self._value = 0


@dataclass
class RenderContext:
    """Per-report rendering state.

    Attributes:
        verbose: Include per-node detail and every load error
        counter: Section numbering for this report only
    """

    verbose: bool = False
    counter: SectionCounter = field(default_factory=SectionCounter)

    def section_title(self, title: str) -> str:
        return f"{self.counter.next()}. {title}"

    def reset(self) -> None:
        self.counter.reset()
