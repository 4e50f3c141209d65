"""HTML renderer with Pygments highlighting for fenced code blocks."""

from __future__ import annotations

import logging
from typing import Optional

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

LOGGER = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"


def style_exists(name: str) -> bool:
    try:
        get_style_by_name(name)
    except ClassNotFound:
        return False
    return True


class HighlightRenderer(mistune.HTMLRenderer):
    """Renders raw HTML verbatim and colours code blocks with inline styles."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        super().__init__(escape=False)
        self.style = style
        self.formatter = HtmlFormatter(style=style, noclasses=True)

    def block_code(self, code: str, info: Optional[str] = None) -> str:
        language = info.split(None, 1)[0] if info and info.strip() else ""
        if not language:
            return super().block_code(code, info)

        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            LOGGER.debug("No lexer for %r, leaving code block plain", language)
            return super().block_code(code, info)
        return highlight(code, lexer, self.formatter)
