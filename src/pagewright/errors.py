"""Exceptions raised while building a site."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class BuildError(Exception):
    """Base class for every failure reported by pagewright."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class BuildIOError(BuildError):
    """Raised when opening, reading, writing or stat-ing a file fails."""

    pass


class MetadataDecodeError(BuildError):
    """Raised when embedded or external structured data cannot be decoded."""

    pass


class MetadataTypeError(MetadataDecodeError):
    """Raised when a metadata value does not have the expected type."""

    def __init__(
        self,
        keys: Sequence[str],
        expected: str,
        value: object,
        path: Optional[Path] = None,
    ) -> None:
        self.keys = tuple(keys)
        self.expected = expected
        self.value = value
        key = ".".join(self.keys)
        super().__init__(
            f"metadata key {key!r}: expected {expected}, got {type(value).__name__}",
            path,
        )


class TemplateError(BuildError):
    """Raised when a template fails to parse or execute."""

    def __init__(self, message: str, path: Optional[Path] = None, stage: str = "page") -> None:
        self.stage = stage
        super().__init__(f"{stage} pass: {message}", path)


class ConfigError(BuildError):
    """Raised when command line input or configuration is invalid."""

    pass


class DuplicateDestinationError(BuildError):
    """Raised when two documents resolve to the same output file."""

    def __init__(self, destination: Path, first: Path, second: Path) -> None:
        self.destination = destination
        self.first = first
        super().__init__(f"output {destination.name!r} already claimed by {first}", second)
