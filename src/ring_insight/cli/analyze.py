"""Analyze command: runs the DiagnosticKernel over a bundle file."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console, read_bundle, resolve_config
from ..exceptions import RingInsightError
from ..insights import DiagnosticKernel, Priority
from ..logging_config import setup_logging
from ..report import JsonFormatter, RenderContext, RichFormatter


@app.command()
def analyze(
    bundle: Path = typer.Argument(
        ...,
        help="JSON file with one artifact bundle per node",
        exists=True, file_okay=True, dir_okay=False,
    ),
    profile: Optional[Path] = typer.Option(
        None, "--profile", "-p",
        help="Execution profile override (TOML with a [limits] table)",
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file (TOML)",
        exists=True, file_okay=True, dir_okay=False,
    ),
    fmt: str = typer.Option(
        "rich", "--format", "-f",
        help="Output format: rich (human-readable) or json",
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w",
        help="Parallel workers",
        min=1, max=32,
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t",
        help="Stop after this many seconds and report partial results",
    ),
    no_release_lookup: bool = typer.Option(
        False, "--no-release-lookup",
        help="Do not fetch the latest releases from the network",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show affected nodes and every load error",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Append a full debug log of the run to this file",
        file_okay=True, dir_okay=False,
    ),
    fail_on_immediate: bool = typer.Option(
        False, "--fail-on-immediate",
        help="Exit 1 when any recommendation needs immediate action",
    ),
):
    """
    Analyze a cluster's diagnostic bundle and list recommendations.

    [bold cyan]Examples:[/bold cyan]

      ring-insight analyze bundle.json

      ring-insight analyze bundle.json --profile limits.toml --timeout 60

      ring-insight analyze bundle.json --format json --no-release-lookup

      ring-insight analyze bundle.json --quiet --log-file run.log
    """
    logger = setup_logging(
        verbose=verbose, quiet=quiet,
        log_file=str(log_file) if log_file else None,
    )

    try:
        settings = resolve_config(
            config=config, workers=workers, timeout=timeout,
            no_release_lookup=no_release_lookup,
        )
        kernel = DiagnosticKernel(read_bundle(bundle), config=settings, profile_path=profile)

        if fmt == "json":
            result = kernel.run()
            JsonFormatter().render(result, RenderContext(verbose=verbose))
        else:
            with console.status("Analyzing...") as status:
                result = kernel.run(on_progress=lambda msg: status.update(msg))
            RichFormatter().render(result, RenderContext(verbose=verbose))

        if fail_on_immediate and result.by_priority(Priority.IMMEDIATE):
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except RingInsightError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
