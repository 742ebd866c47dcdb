"""Shared CLI helpers."""

import json
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..exceptions import RingInsightError
from ..model.artifacts import NodeArtifacts

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    timeout: Optional[float] = None,
    no_release_lookup: bool = False,
) -> AnalysisConfig:
    """Build analysis configuration from CLI options."""
    overrides = {
        "workers": workers,
        "analysis_timeout_seconds": timeout,
    }
    if no_release_lookup:
        overrides["enable_release_lookup"] = False
    return load_config(config_file=config, **overrides)


def read_bundle(path: Path) -> list[NodeArtifacts]:
    """Node artifact bundles from a JSON file.

    The file holds either a list of node objects or ``{"nodes": [...]}``.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise RingInsightError(f"Cannot read bundle {path}", {"reason": str(e)})

    if isinstance(data, dict):
        data = data.get("nodes", [])
    if not isinstance(data, list) or not all(isinstance(node, dict) for node in data):
        raise RingInsightError(f"Bundle {path} must hold a list of node objects")
    return [NodeArtifacts.from_dict(node) for node in data]
