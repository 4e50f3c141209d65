"""Utility helpers for working with files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator

from pagewright.errors import BuildIOError

MARKDOWN_EXTENSIONS = (".md", ".markdown")


def iter_markdown_paths(source_dir: Path, extensions: Iterable[str] = MARKDOWN_EXTENSIONS) -> Iterator[Path]:
    """Yield Markdown files directly under ``source_dir``, sorted by name."""
    suffixes = {ext.lower() for ext in extensions}
    try:
        children = sorted(source_dir.iterdir())
    except OSError as exc:
        raise BuildIOError(f"list directory: {exc.strerror or exc}", source_dir) from exc

    for child in children:
        if child.suffix.lower() in suffixes and child.is_file():
            yield child


def read_text(path: Path) -> str:
    """Read a UTF-8 file, reporting failures with the offending path."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise BuildIOError(f"read: {exc.strerror or exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise BuildIOError(f"read: not valid UTF-8 ({exc.reason})", path) from exc


def stat_path(path: Path) -> os.stat_result:
    try:
        return path.stat()
    except OSError as exc:
        raise BuildIOError(f"stat: {exc.strerror or exc}", path) from exc


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a temporary file and a rename.

    Readers of ``path`` see either the previous file or the complete new
    one, never a partially written file.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise BuildIOError(f"create: {exc.strerror or exc}", path) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        # mkstemp creates owner-only files; outputs are meant to be served.
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise BuildIOError(f"write: {exc.strerror or exc}", path) from exc


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildIOError(f"make directory: {exc.strerror or exc}", path) from exc
    return path
