"""Exceptions raised by secretsweep."""
from __future__ import annotations


class SecretSweepError(Exception):
    """Base exception for all secretsweep errors."""


class BatchValidationError(SecretSweepError):
    """Raised when a batch is rejected before any file is scanned."""


class FileReadError(SecretSweepError):
    """Raised when a file in the batch cannot be read or decoded."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"{file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


class PatternLoadError(SecretSweepError):
    """Raised when a pattern table file is malformed."""


class ConfigError(SecretSweepError):
    """Raised when a settings file is malformed."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly named settings file does not exist."""
