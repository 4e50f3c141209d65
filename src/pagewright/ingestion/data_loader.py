"""Loading of the optional site-wide data file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from pagewright.errors import MetadataDecodeError
from pagewright.utils.files import read_text


def load_site_data(path: Path) -> Any:
    """Decode a JSON (``.json``) or YAML (anything else) data file."""
    text = read_text(path)
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MetadataDecodeError(f"decode JSON: {exc}", path) from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MetadataDecodeError(f"decode YAML: {exc}", path) from exc
