"""Build configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from pagewright.errors import ConfigError
from pagewright.render.highlight import DEFAULT_STYLE, style_exists
from pagewright.utils.files import MARKDOWN_EXTENSIONS, ensure_dir

INDEX_NAME = "index.html"


@dataclass(slots=True)
class BuildConfig:
    source_dir: Path = Path(".")
    output_dir: Optional[Path] = None
    page_template: Optional[Path] = None
    index_template: Optional[Path] = None
    data_file: Optional[Path] = None
    gen_index: bool = True
    style: str = DEFAULT_STYLE
    force: bool = False
    jobs: Optional[int] = None
    extensions: Tuple[str, ...] = MARKDOWN_EXTENSIONS

    def __post_init__(self) -> None:
        self.source_dir = Path(self.source_dir)
        if self.output_dir is None:
            self.output_dir = self.source_dir
        self.output_dir = Path(self.output_dir)

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir) if self.output_dir is not None else self.source_dir

    @property
    def index_path(self) -> Path:
        return self.output_path / INDEX_NAME

    def validate(self) -> None:
        """Reject unusable settings before any work starts."""
        if not self.source_dir.is_dir():
            raise ConfigError("source directory does not exist", self.source_dir)
        for label, path in (
            ("page template", self.page_template),
            ("index template", self.index_template),
            ("data file", self.data_file),
        ):
            if path is not None and not Path(path).is_file():
                raise ConfigError(f"{label} not found", Path(path))
        if not style_exists(self.style):
            raise ConfigError(f"unknown highlight style {self.style!r}")
        if self.jobs is not None and self.jobs < 1:
            raise ConfigError(f"jobs must be at least 1, got {self.jobs}")

    def resolve_output_dir(self) -> Path:
        return ensure_dir(self.output_path)
