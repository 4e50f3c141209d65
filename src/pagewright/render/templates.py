"""Jinja2 environments, template functions and the built-in templates."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import jinja2

from pagewright.errors import TemplateError
from pagewright.models import Metadata
from pagewright.utils.files import read_text
from pagewright.utils.text import limit, link, link_to_title, remove_ext, slugify

DEFAULT_PAGE = """<!DOCTYPE html>
<html>
	<head>
		<meta name="generator" content="pagewright" />
		{%- if meta.author %}
		<meta name="author" content="{{ meta.author | e }}" />
		{%- endif %}
		{%- if meta.desc %}
		<meta name="description" content="{{ meta.desc | e }}" />
		{%- endif %}

		<title>{{ meta.title }}{% if data and data.title %} - {{ data.title }}{% endif %}</title>
	</head>
	<body>
		{{ content }}
	</body>
</html>
"""

DEFAULT_INDEX = """<!DOCTYPE html>
<html>
	<head>
		<meta name="generator" content="pagewright" />

		<title>Index{% if data and data.title %} - {{ data.title }}{% endif %}</title>
	</head>
	<body>
		{%- for page in pages %}
		<div>
			<a href="{{ page.output }}">{{ page.title }} ({{ page.time.strftime("%Y-%m-%d") }})</a>
		</div>
		{%- endfor %}
	</body>
</html>
"""

TEMPLATE_FUNCS: Dict[str, Callable[..., Any]] = {
    "slugify": slugify,
    "link_to_title": link_to_title,
    "link": link,
    "remove_ext": remove_ext,
    "limit": limit,
}


@dataclass(slots=True, frozen=True)
class Delimiters:
    """Template delimiters; a document can override them in its metadata."""

    left: str = "{{"
    right: str = "}}"
    block_left: str = "{%"
    block_right: str = "%}"
    comment_left: str = "{{/*"
    comment_right: str = "*/}}"

    @classmethod
    def from_metadata(cls, meta: Metadata) -> "Delimiters":
        keys = ("template", "delims")
        defaults = cls()
        return cls(
            left=meta.get_str(*keys, "left", default=defaults.left),
            right=meta.get_str(*keys, "right", default=defaults.right),
            block_left=meta.get_str(*keys, "block_left", default=defaults.block_left),
            block_right=meta.get_str(*keys, "block_right", default=defaults.block_right),
            comment_left=meta.get_str(*keys, "comment_left", default=defaults.comment_left),
            comment_right=meta.get_str(*keys, "comment_right", default=defaults.comment_right),
        )


@lru_cache(maxsize=32)
def template_environment(delims: Delimiters = Delimiters()) -> jinja2.Environment:
    env = jinja2.Environment(
        variable_start_string=delims.left,
        variable_end_string=delims.right,
        block_start_string=delims.block_left,
        block_end_string=delims.block_right,
        comment_start_string=delims.comment_left,
        comment_end_string=delims.comment_right,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters.update(TEMPLATE_FUNCS)
    env.globals.update(TEMPLATE_FUNCS)
    return env


def load_template(path: Optional[Path], default: str, name: str) -> jinja2.Template:
    """Compile the template at ``path``, or ``default`` when no path is given."""
    source = default if path is None else read_text(path)
    try:
        return template_environment().from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"parse {name} template: {exc}", path, stage=name) from exc
