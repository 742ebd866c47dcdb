"""JSON formatter for diagnostic results."""

import json

from ..insights.models import DiagnosticResult
from .base import BaseFormatter
from .context import RenderContext


class JsonFormatter(BaseFormatter):
    """Render recommendations and load errors as JSON."""

    def render(self, result: DiagnosticResult, context: RenderContext) -> None:
        print(self.format(result, context))

    def format(self, result: DiagnosticResult, context: RenderContext) -> str:
        data = {
            "complete": result.complete,
            "nodes": result.cluster.node_names,
            "recommendations": [
                {
                    "priority": r.priority.name.lower(),
                    "category": r.category.value,
                    "nodes": sorted(r.nodes),
                    "finding": r.finding,
                }
                for r in result.recommendations
            ],
            "inconsistent_settings": result.inconsistent_settings(),
            "load_errors": [
                {"node": e.node, "code": e.code.value, "reason": e.reason} for e in result.load_errors
            ],
        }
        return json.dumps(data, indent=2)
