"""Wire batch exception hierarchy."""

from __future__ import annotations


class WireBatchError(Exception):
    """Base exception for all wire batch errors."""


class LineParseError(WireBatchError):
    """A single source record could not be turned into a payout item."""

    def __init__(self, line_number: int, message: str, raw_line: str | None = None) -> None:
        self.line_number = line_number
        self.raw_line = raw_line
        super().__init__(message)


class ProviderError(WireBatchError):
    """Payment-rail provider call failed."""

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(WireBatchError):
    """Required configuration is missing or invalid."""


class FileStoreError(WireBatchError):
    """Artifact storage operation failed."""
