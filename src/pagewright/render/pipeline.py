"""Two-pass document rendering followed by the page wrap.

1. The Markdown tree is rendered to HTML (the body pass).
2. That HTML is compiled as a template and executed with the page and
   site data, so documents can reference both (the content pass).
3. The result is wrapped in the outer page template (the page pass).

Everything happens in memory; callers write the returned string only
once all three passes have succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, TextIO

import jinja2
import mistune

from pagewright.errors import TemplateError
from pagewright.ingestion.markdown_loader import DocumentTree
from pagewright.models import Page
from pagewright.render.templates import Delimiters, template_environment
from pagewright.utils.arena import BufferArena

LOGGER = logging.getLogger(__name__)

# Failures raised by Jinja2 itself or by template functions given bad input.
TEMPLATE_FAILURES = (jinja2.TemplateError, TypeError, ValueError, AttributeError)


class ErrWriter:
    """Writer that remembers the first failure and drops everything after it.

    This lets a render walk run to completion without checking each write;
    the caller inspects :attr:`error` once at the end.
    """

    def __init__(self, target: TextIO) -> None:
        self.target = target
        self.error: Optional[Exception] = None

    def write(self, data: str) -> int:
        if self.error is not None:
            return 0
        try:
            return self.target.write(data)
        except (OSError, ValueError) as exc:
            self.error = exc
            return 0


def render_body(out: TextIO, tree: DocumentTree, renderer: mistune.HTMLRenderer) -> None:
    """Render every node of ``tree`` into ``out``.

    Raises the first error reported by ``out``, after the walk finishes.
    """
    writer = ErrWriter(out)
    for node in tree.nodes:
        writer.write(renderer.render_token(node, tree.state))
    if writer.error is not None:
        raise writer.error


@dataclass(slots=True)
class RenderContext:
    page: Page
    page_template: jinja2.Template
    arena: BufferArena
    data: Any = None


def render_document(tree: DocumentTree, renderer: mistune.HTMLRenderer, context: RenderContext) -> str:
    """Run the body, content and page passes and return the final HTML."""
    page = context.page
    source = page.source

    with context.arena.borrow() as buffer:
        try:
            render_body(buffer, tree, renderer)
        except (OSError, ValueError) as exc:
            raise TemplateError(f"render markdown: {exc}", source, stage="body") from exc
        body = buffer.getvalue()

    delims = Delimiters.from_metadata(page.meta)
    try:
        content_template = template_environment(delims).from_string(body)
        page.content = content_template.render(page=page, meta=page.meta, data=context.data)
    except TEMPLATE_FAILURES as exc:
        raise TemplateError(str(exc), source, stage="content") from exc

    try:
        return context.page_template.render(
            page=page,
            meta=page.meta,
            data=context.data,
            content=page.content,
        )
    except TEMPLATE_FAILURES as exc:
        raise TemplateError(str(exc), source, stage="page") from exc
