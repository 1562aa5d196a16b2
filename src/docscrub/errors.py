"""Error types raised while scrubbing files."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ScrubError(Exception):
    """Base exception for all docscrub errors."""

    def __init__(self, message: str, path: Path | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.context: dict[str, Any] = context

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class FormatError(ScrubError):
    """Input is not a valid container, image or PDF for its claimed type."""


class FileIOError(ScrubError):
    """Read, write, rename or backup failure."""


class UnsupportedError(ScrubError):
    """File type is unknown, filtered out, or its scrubber is not enabled."""


class ConfigError(ScrubError):
    """Run configuration is invalid."""
