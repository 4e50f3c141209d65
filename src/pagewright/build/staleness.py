"""Timestamp-based decision of whether an output needs rebuilding."""

from __future__ import annotations

from pathlib import Path

from pagewright.errors import BuildIOError


def should_rebuild(src_mtime_ns: int, dst: Path) -> bool:
    """Return True unless ``dst`` exists and is strictly newer than the source.

    Only modification times are compared, so a touched but unchanged
    destination counts as up to date.
    """
    try:
        dst_stat = dst.stat()
    except FileNotFoundError:
        return True
    except OSError as exc:
        raise BuildIOError(f"stat: {exc.strerror or exc}", dst) from exc

    return not dst_stat.st_mtime_ns > src_mtime_ns
