"""Base formatter interface for diagnostic report rendering."""

from abc import ABC, abstractmethod

from ..insights.models import DiagnosticResult
from .context import RenderContext


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, result: DiagnosticResult, context: RenderContext) -> None:
        """Render the result to stdout/stderr as appropriate."""

    @abstractmethod
    def format(self, result: DiagnosticResult, context: RenderContext) -> str:
        """Return formatted string representation of the result."""
