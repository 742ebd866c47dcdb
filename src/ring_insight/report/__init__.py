"""Report formatters and rendering state."""

from .base import BaseFormatter
from .context import RenderContext, SectionCounter
from .json_formatter import JsonFormatter
from .rich_formatter import RichFormatter

__all__ = [
    "BaseFormatter",
    "RenderContext",
    "SectionCounter",
    "JsonFormatter",
    "RichFormatter",
]
