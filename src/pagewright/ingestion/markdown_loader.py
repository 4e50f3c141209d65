"""Markdown parsing and embedded metadata extraction.

Uses mistune in AST mode so the parsed document can be inspected and
edited before it is rendered. Metadata lives in an HTML comment whose
text starts with ``meta``::

    <!--meta
    title: Release notes
    time: 2021-06-01T09:00:00Z
    -->
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import mistune
import yaml
from bs4 import BeautifulSoup, Comment
from mistune.core import BlockState

from pagewright.errors import MetadataDecodeError, MetadataTypeError
from pagewright.models import Metadata, coerce_time
from pagewright.utils.text import remove_ext

LOGGER = logging.getLogger(__name__)

META_PREFIX = "meta"

Node = Dict[str, Any]

# Values used for metadata keys a document does not set itself.
DEFAULT_META: Dict[str, Callable[[Path, os.stat_result], Any]] = {
    "title": lambda path, stat: remove_ext(path.name),
    "time": lambda path, stat: datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
}


@dataclass(slots=True)
class DocumentTree:
    """Parsed Markdown document: mistune tokens plus their block state."""

    nodes: List[Node]
    state: BlockState

    def walk(self) -> Iterator[Tuple[Node, List[Node]]]:
        """Yield ``(node, siblings)`` pairs depth-first, in document order."""

        def _walk(siblings: List[Node]) -> Iterator[Tuple[Node, List[Node]]]:
            for node in list(siblings):
                yield node, siblings
                children = node.get("children")
                if isinstance(children, list):
                    yield from _walk(children)

        return _walk(self.nodes)

    def remove(self, node: Node) -> bool:
        """Unlink ``node`` from wherever it sits in the tree."""
        for candidate, siblings in self.walk():
            if candidate is node:
                index = next(i for i, sibling in enumerate(siblings) if sibling is node)
                del siblings[index]
                return True
        return False


def parse_document(text: str) -> DocumentTree:
    markdown = mistune.create_markdown(renderer="ast")
    nodes, state = markdown.parse(text)
    return DocumentTree(nodes=nodes, state=state)


def _find_comment(raw: str) -> Optional[str]:
    soup = BeautifulSoup(raw, "html.parser")
    comment = soup.find(string=lambda text: isinstance(text, Comment))
    return str(comment) if comment is not None else None


def _decode(text: str, source: Optional[Path]) -> Metadata:
    try:
        values = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MetadataDecodeError(f"decode metadata block: {exc}", source) from exc

    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise MetadataDecodeError(
            f"metadata block must be a mapping, got {type(values).__name__}", source
        )
    return Metadata({str(key): value for key, value in values.items()}, source)


def extract_metadata(tree: DocumentTree, detach: bool = True, *, source: Optional[Path] = None) -> Metadata:
    """Find, decode and optionally detach the document's metadata block.

    Only ``block_html`` nodes are inspected, and within each only the
    first comment counts. The first comment carrying the ``meta`` prefix
    wins; later blocks are left untouched. A document without such a
    comment yields empty metadata.
    """
    for node, siblings in tree.walk():
        if node.get("type") != "block_html":
            continue

        comment = _find_comment(node.get("raw", ""))
        if comment is None or not comment.startswith(META_PREFIX):
            continue

        meta = _decode(comment[len(META_PREFIX):], source)
        if detach:
            index = next(i for i, sibling in enumerate(siblings) if sibling is node)
            del siblings[index]
        LOGGER.debug("Found %d metadata keys in %s", len(meta), source or "<document>")
        return meta

    return Metadata(path=source)


def resolve_metadata(meta: Metadata, path: Path, stat: os.stat_result) -> Metadata:
    """Back-fill defaults and normalize ``title`` and ``time``."""
    updates: Dict[str, Any] = {}
    for key, default in DEFAULT_META.items():
        value = meta.get(key)
        if value is None or value == "":
            updates[key] = default(path, stat)

    title = updates.get("title", meta.get("title"))
    if isinstance(title, (int, float)) and not isinstance(title, bool):
        updates["title"] = str(title)
    elif not isinstance(title, str):
        raise MetadataTypeError(("title",), "string", title, path)

    updates["time"] = coerce_time(updates.get("time", meta.get("time")), ("time",), path)

    resolved = meta.merged(updates)
    resolved.path = path
    return resolved
