"""Configuration loading and management for Ring Insight.

Two layers of configuration exist:

    * ``ExecutionProfile`` - cluster-wide analysis thresholds (``Limits``),
      optionally overridden from a TOML file. A broken override file never
      aborts analysis: defaults are used and a load error is recorded.
    * ``AnalysisConfig`` - how the engine runs (worker count, timeouts,
      whether the upstream release lookup is attempted). Sources are merged
      in priority order:
        1. Defaults (defined in AnalysisConfig)
        2. Explicit config file (``[analysis]`` table)
        3. Environment variables (RING_INSIGHT_* prefix)
        4. Keyword overrides

Example:
    >>> config = load_config(workers=2)
    >>> config.workers
    2
    >>> profile = load_profile(Path("profile.toml"), errors)
    >>> profile.limits.number_of_log_days
    90
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError, ProfileLoadError
from .load_errors import LoadErrorLog
from .logging_config import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "RING_INSIGHT_"


@dataclass(frozen=True)
class Limits:
    """Thresholds and query budgets for one analysis run.

    Attributes:
        Log window:
            number_of_log_days: Only log entries this many days before each
                node's newest entry are searched

        Query budgets (per node):
            aggregation_warnings: Aggregation-query warnings fetched
            batch_size_warnings: Large batch warnings fetched
            dropped_hints: Dropped hint messages fetched
            dropped_messages: Dropped message reports fetched
            gossip_pause_warnings: Local pause warnings fetched
            hinted_handoff_messages: Hinted handoff messages fetched
            prepared_statement_warnings: Discarded prepared statement warnings fetched
            repair_error_messages: Repair errors fetched

        Rates:
            dropped_messages_per_hour_threshold: Dropped messages per hour worth reporting
            gossip_pause_time_percentage_threshold: % of uptime spent in local pauses
            hinted_handoff_per_hour_threshold: Hints per hour worth reporting
            prepared_statement_messages_per_hour_threshold: Discards per hour worth reporting
            tombstone_warnings_per_day_threshold: Tombstone warnings per day worth reporting
            token_ownership_percentage_imbalance_threshold: Relative ownership spread

        Display:
            repair_error_messages_displayed_in_report: Repair errors shown
    """

    number_of_log_days: int = 90

    aggregation_warnings: int = 1_000_000
    batch_size_warnings: int = 1_000_000
    dropped_hints: int = 100_000
    dropped_messages: int = 1_000_000
    gossip_pause_warnings: int = 1_000_000
    hinted_handoff_messages: int = 1_000_000
    prepared_statement_warnings: int = 1_000_000
    repair_error_messages: int = 10_000

    dropped_messages_per_hour_threshold: int = 25
    gossip_pause_time_percentage_threshold: float = 5.0
    hinted_handoff_per_hour_threshold: int = 25
    prepared_statement_messages_per_hour_threshold: int = 1
    tombstone_warnings_per_day_threshold: int = 100
    token_ownership_percentage_imbalance_threshold: float = 0.2

    repair_error_messages_displayed_in_report: int = 14

    def __post_init__(self) -> None:
        """Validate limits."""
        if self.number_of_log_days < 1:
            raise ValueError("number_of_log_days must be at least 1")

        budget_fields = [
            "aggregation_warnings",
            "batch_size_warnings",
            "dropped_hints",
            "dropped_messages",
            "gossip_pause_warnings",
            "hinted_handoff_messages",
            "prepared_statement_warnings",
            "repair_error_messages",
        ]
        for field_name in budget_fields:
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")

        if not 0.0 <= self.gossip_pause_time_percentage_threshold <= 100.0:
            raise ValueError("gossip_pause_time_percentage_threshold must be between 0 and 100")
        if not 0.0 <= self.token_ownership_percentage_imbalance_threshold <= 1.0:
            raise ValueError(
                "token_ownership_percentage_imbalance_threshold must be between 0.0 and 1.0"
            )
        if self.repair_error_messages_displayed_in_report < 0:
            raise ValueError("repair_error_messages_displayed_in_report must be non-negative")


@dataclass(frozen=True)
class ExecutionProfile:
    """Cluster-wide execution profile: the thresholds a run is judged against."""

    limits: Limits = field(default_factory=Limits)

    @classmethod
    def default(cls) -> ExecutionProfile:
        return cls()


def load_profile(path: Optional[Path], load_errors: LoadErrorLog) -> ExecutionProfile:
    """Load an execution profile override from a TOML file.

    The file holds a ``[limits]`` table whose keys are ``Limits`` fields;
    absent keys keep their defaults. Any failure (missing file, bad TOML,
    unknown key, invalid value) yields the default profile and records a
    load error against ``ALL`` nodes.

    Args:
        path: Override file, or None for the defaults
        load_errors: Shared collection receiving the failure, if any

    Returns:
        The merged ExecutionProfile, never raises
    """
    if path is None:
        return ExecutionProfile.default()

    try:
        return _profile_from_file(path)
    except ProfileLoadError as e:
        e.record(load_errors)
        return ExecutionProfile.default()


def _profile_from_file(path: Path) -> ExecutionProfile:
    if not path.exists():
        raise ProfileLoadError(path, "file not found")
    try:
        data = _load_toml_file(path)
    except ConfigurationError as e:
        raise ProfileLoadError(path, e.message)
    except Exception as e:
        raise ProfileLoadError(path, str(e))

    limits_dict = data.get("limits", {})
    if not isinstance(limits_dict, dict):
        raise ProfileLoadError(path, "[limits] must be a table")

    known = {f.name for f in fields(Limits)}
    unknown = sorted(set(limits_dict) - known)
    if unknown:
        raise ProfileLoadError(path, f"unknown limits: {', '.join(unknown)}")

    try:
        return ExecutionProfile(limits=Limits(**limits_dict))
    except (TypeError, ValueError) as e:
        raise ProfileLoadError(path, str(e))


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for analysis execution.

    Attributes:
        workers: Number of parallel workers (None = auto-detect)
        release_lookup_timeout_seconds: Timeout for the upstream release-note fetch
        analysis_timeout_seconds: Caller-level timeout for the whole run
            (None = no timeout)
        enable_release_lookup: Attempt the upstream latest-release lookup
        log_query_limit: Fallback per-node budget for ad-hoc log searches
    """

    workers: Optional[int] = None
    release_lookup_timeout_seconds: float = 10.0
    analysis_timeout_seconds: Optional[float] = None
    enable_release_lookup: bool = True
    log_query_limit: int = 10_000

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.release_lookup_timeout_seconds <= 0:
            raise InvalidConfigError(
                "release_lookup_timeout_seconds",
                self.release_lookup_timeout_seconds,
                "must be positive",
            )
        if self.analysis_timeout_seconds is not None and self.analysis_timeout_seconds <= 0:
            raise InvalidConfigError(
                "analysis_timeout_seconds", self.analysis_timeout_seconds, "must be positive"
            )
        if self.log_query_limit < 1:
            raise InvalidConfigError("log_query_limit", self.log_query_limit, "must be at least 1")


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load analysis configuration.

    Args:
        config_file: Optional TOML file with an ``[analysis]`` table
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If config file or environment values are invalid
    """
    merged: dict = {}

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            section = _load_toml_file(config_file).get("analysis", {})
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")
        merged.update(section)

    merged.update(_load_env_vars())

    # None overrides mean "flag not given"
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from RING_INSIGHT_* environment variables.

    Supported environment variables:
        RING_INSIGHT_WORKERS: int
        RING_INSIGHT_RELEASE_LOOKUP_TIMEOUT_SECONDS: float
        RING_INSIGHT_ANALYSIS_TIMEOUT_SECONDS: float
        RING_INSIGHT_ENABLE_RELEASE_LOOKUP: bool (true/false/1/0)
        RING_INSIGHT_LOG_QUERY_LIMIT: int

    Returns:
        Dict of field_name -> parsed_value for any RING_INSIGHT_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
