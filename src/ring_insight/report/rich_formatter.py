"""Rich terminal formatter for diagnostic results."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..insights.models import DiagnosticResult, Priority
from ..metrics.formatting import human_bytes
from ..metrics.samples import MetricSampleList, summarize
from .base import BaseFormatter
from .context import RenderContext

console = Console()

_PRIORITY_LABELS = {
    Priority.IMMEDIATE: "[red bold]immediate[/red bold]",
    Priority.NEAR: "[yellow]near term[/yellow]",
    Priority.LONG: "[green]long term[/green]",
}

# Load errors shown without --verbose
_MAX_LOAD_ERRORS = 20


class RichFormatter(BaseFormatter):
    """Summary panel, recommendation table and load-error table."""

    def render(self, result: DiagnosticResult, context: RenderContext) -> None:
        self._print_summary(result, context)
        self._print_recommendations(result, context)
        self._print_load_errors(result, context)

    def format(self, result: DiagnosticResult, context: RenderContext) -> str:
        # Rich output goes directly to console; return empty string
        self.render(result, context)
        return ""

    def _print_summary(self, result: DiagnosticResult, context: RenderContext) -> None:
        cluster = result.cluster
        load = summarize(
            MetricSampleList.from_mapping(
                {n.name: n.info.load_bytes for n in cluster.nodes if n.info.load_bytes >= 0}, "load"
            )
        )
        lines = [
            f"Nodes: [bold]{len(cluster)}[/bold] in {len(cluster.dc_names())} datacenter(s)",
            f"Releases: {', '.join(cluster.distinct_releases())}",
            f"Recommendations: [bold]{len(result.recommendations)}[/bold]",
        ]
        if not load.is_empty:
            lines.append(f"Total load: {human_bytes(load.sum)}")
        if cluster.is_log_window_truncated():
            days = cluster.profile.limits.number_of_log_days
            lines.append(f"[dim]Logs limited to the last {days} days per node[/dim]")
        if not result.complete:
            lines.append("[yellow]Analysis timed out: results are partial[/yellow]")
        console.print(
            Panel("\n".join(lines), title=f"[bold cyan]{context.section_title('Cluster')}[/bold cyan]", expand=False)
        )

    def _print_recommendations(self, result: DiagnosticResult, context: RenderContext) -> None:
        title = context.section_title("Recommendations")
        table = Table(title=title, show_lines=True)
        table.add_column("Priority", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Finding")
        if context.verbose:
            table.add_column("Nodes")

        for priority in Priority:
            for rec in result.by_priority(priority):
                row = [_PRIORITY_LABELS[priority], rec.category.value, rec.finding]
                if context.verbose:
                    row.append(", ".join(sorted(rec.nodes)) or "all")
                table.add_row(*row)

        if result.recommendations:
            console.print(table)
        else:
            console.print(f"[green]{title}: none[/green]")

    def _print_load_errors(self, result: DiagnosticResult, context: RenderContext) -> None:
        if not result.load_errors:
            return
        errors = result.load_errors if context.verbose else result.load_errors[:_MAX_LOAD_ERRORS]
        table = Table(title=context.section_title("Load errors"))
        table.add_column("Code", no_wrap=True)
        table.add_column("Node", no_wrap=True)
        table.add_column("Reason")
        for error in errors:
            table.add_row(error.code.value, error.node, error.reason)
        console.print(table)
        hidden = len(result.load_errors) - len(errors)
        if hidden:
            console.print(f"[dim]{hidden} more load errors, use --verbose to show all[/dim]")
