"""Core pagewright data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from pagewright.errors import MetadataTypeError


def coerce_time(value: Any, keys: tuple[str, ...] = ("time",), path: Optional[Path] = None) -> datetime:
    """Convert a decoded metadata value into a timezone-aware datetime.

    Naive datetimes and plain dates are taken to be UTC.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise MetadataTypeError(keys, "timestamp", value, path)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise MetadataTypeError(keys, "timestamp", value, path) from exc
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise MetadataTypeError(keys, "timestamp", value, path) from exc
        return coerce_time(parsed, keys, path)
    raise MetadataTypeError(keys, "timestamp", value, path)


class Metadata(Mapping[str, Any]):
    """Read-only document metadata with typed accessors.

    Values are whatever the structured-data decoder produced: strings,
    numbers, booleans, timestamps, nested mappings and lists. The
    accessors walk nested keys and raise ``MetadataTypeError`` when a
    value is present but has the wrong type.
    """

    __slots__ = ("_values", "path")

    def __init__(self, values: Optional[Mapping[str, Any]] = None, path: Optional[Path] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})
        self.path = path

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"

    def lookup(self, *keys: str) -> Any:
        """Return the value at a nested key path, or None if any level is missing."""
        if not keys:
            raise ValueError("no keys provided")

        current: Any = self._values
        for key in keys[:-1]:
            current = current.get(key) if isinstance(current, Mapping) else None
            if not isinstance(current, Mapping):
                return None
        return current.get(keys[-1])

    def get_str(self, *keys: str, default: Optional[str] = None) -> Optional[str]:
        value = self.lookup(*keys)
        if value is None:
            return default
        if not isinstance(value, str):
            raise MetadataTypeError(keys, "string", value, self.path)
        return value

    def get_mapping(self, *keys: str) -> Optional[Mapping[str, Any]]:
        value = self.lookup(*keys)
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise MetadataTypeError(keys, "mapping", value, self.path)
        return value

    def get_time(self, *keys: str) -> Optional[datetime]:
        value = self.lookup(*keys)
        if value is None:
            return None
        return coerce_time(value, keys, self.path)

    def merged(self, updates: Mapping[str, Any]) -> "Metadata":
        """Return a copy with ``updates`` applied on top."""
        values = dict(self._values)
        values.update(updates)
        return Metadata(values, self.path)

    @property
    def title(self) -> str:
        return self.get_str("title", default="") or ""

    @property
    def time(self) -> Optional[datetime]:
        return self.get_time("time")


@dataclass(slots=True)
class Page:
    """A document as seen by the content and page templates."""

    source: Path
    meta: Metadata
    output: str
    content: str = ""

    @property
    def input(self) -> str:
        return self.source.name


@dataclass(slots=True, frozen=True)
class BuildResult:
    """Record of one processed document, used to populate the index."""

    source: Path
    destination: Path
    source_mtime: datetime
    destination_mtime: datetime
    meta: Metadata
    rebuilt: bool = True

    @property
    def time(self) -> datetime:
        value = self.meta.time
        return value if value is not None else self.source_mtime

    @property
    def title(self) -> str:
        return self.meta.title

    @property
    def output(self) -> str:
        return self.destination.name
