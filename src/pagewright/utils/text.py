"""Text helpers used for output names and by templates."""

from __future__ import annotations

import re
import unicodedata
from pathlib import PurePath
from typing import Any, Sequence

_NON_WORD = re.compile(r"[^\w]+", flags=re.UNICODE)


def slugify(text: str) -> str:
    """Turn a title into a lowercase, dash-separated file name stem."""
    text = unicodedata.normalize("NFKD", str(text))
    text = "".join(char for char in text if not unicodedata.combining(char)).lower()
    text = _NON_WORD.sub("-", text)
    return text.strip("-_").replace("_", "-")


def remove_ext(path: str) -> str:
    """Remove the final extension from a file name or path."""
    name = str(path)
    suffix = PurePath(name).suffix
    return name[: len(name) - len(suffix)] if suffix else name


def link(slug: str) -> str:
    return f"{slug}.html"


def link_to_title(title: str) -> str:
    return link(slugify(title))


def limit(data: Sequence[Any], length: int) -> Sequence[Any]:
    """Return at most the first ``length`` items of ``data``."""
    length = max(length, 0)
    if len(data) < length:
        return data
    return data[:length]
