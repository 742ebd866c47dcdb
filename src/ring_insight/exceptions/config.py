"""Configuration exceptions: execution profiles and analysis settings."""

from pathlib import Path
from typing import Any

from .base import RingInsightError
from .taxonomy import ErrorCode


class ConfigurationError(RingInsightError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ProfileLoadError(ConfigurationError):
    """Raised when an execution profile override file cannot be read.

    Recoverable: the run falls back to the default profile.
    """

    code = ErrorCode.RI400

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Unable to load execution profile {path}, defaults used",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
