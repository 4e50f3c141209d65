"""Site build pipeline: load every document concurrently, then generate the index."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import jinja2
import mistune

from pagewright.build.collector import OrderedCollector
from pagewright.build.staleness import should_rebuild
from pagewright.build.taskgroup import CancellationToken, TaskGroup
from pagewright.config import BuildConfig
from pagewright.errors import DuplicateDestinationError, TemplateError
from pagewright.ingestion.data_loader import load_site_data
from pagewright.ingestion.markdown_loader import extract_metadata, parse_document, resolve_metadata
from pagewright.models import BuildResult, Metadata, Page
from pagewright.render.highlight import HighlightRenderer
from pagewright.render.pipeline import TEMPLATE_FAILURES, RenderContext, render_document
from pagewright.render.templates import DEFAULT_INDEX, DEFAULT_PAGE, load_template
from pagewright.utils.arena import BufferArena
from pagewright.utils.files import iter_markdown_paths, read_text, stat_path, write_atomic
from pagewright.utils.text import link, remove_ext, slugify

LOGGER = logging.getLogger(__name__)


def find_sources(config: BuildConfig) -> list[Path]:
    """Find the Markdown documents directly under the source directory."""
    return list(iter_markdown_paths(config.source_dir, config.extensions))


def output_name(meta: Metadata, source: Path) -> str:
    slug = slugify(meta.title) or slugify(remove_ext(source.name)) or "page"
    return link(slug)


def _mtime(stat: os.stat_result) -> datetime:
    return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)


@dataclass(slots=True)
class BuildReport:
    results: List[BuildResult] = field(default_factory=list)
    built: int = 0
    skipped: int = 0
    load_errors: List[Exception] = field(default_factory=list)
    generate_errors: List[Exception] = field(default_factory=list)
    index_written: bool = False

    @property
    def ok(self) -> bool:
        return not self.load_errors and not self.generate_errors


class DestinationClaims:
    """Lock-guarded record of which source owns each output file."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owners: Dict[Path, Path] = {}

    def claim(self, destination: Path, owner: Path) -> None:
        with self._lock:
            first = self._owners.setdefault(destination, owner)
        if first != owner:
            raise DuplicateDestinationError(destination, first, owner)


class SiteBuilder:
    """Coordinates document loading, rendering and index generation."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        page_template: jinja2.Template,
        index_template: jinja2.Template,
        data: Any = None,
        arena: Optional[BufferArena] = None,
        renderer_factory: Callable[[str], mistune.HTMLRenderer] = HighlightRenderer,
    ) -> None:
        self.config = config
        self.page_template = page_template
        self.index_template = index_template
        self.data = data
        self.arena = arena if arena is not None else BufferArena()
        self.renderer_factory = renderer_factory

    @classmethod
    def from_config(cls, config: BuildConfig, *, arena: Optional[BufferArena] = None) -> "SiteBuilder":
        """Validate ``config`` and load templates and site data up front."""
        config.validate()
        page_template = load_template(config.page_template, DEFAULT_PAGE, "page")
        index_template = load_template(config.index_template, DEFAULT_INDEX, "index")
        data = load_site_data(config.data_file) if config.data_file is not None else None
        return cls(
            config,
            page_template=page_template,
            index_template=index_template,
            data=data,
            arena=arena,
        )

    @property
    def output_dir(self) -> Path:
        return self.config.output_path

    def build(self, sources: Sequence[Path]) -> BuildReport:
        """Run the load phase and, if it succeeded, the generate phase."""
        self.config.resolve_output_dir()
        report = BuildReport()

        report.results, report.load_errors = self.load(sources)
        report.built = sum(1 for result in report.results if result.rebuilt)
        report.skipped = len(report.results) - report.built
        if report.load_errors:
            LOGGER.debug("Load phase failed with %d errors", len(report.load_errors))
            return report
        if not self.config.gen_index:
            return report

        report.generate_errors = self.generate(report.results)
        report.index_written = not report.generate_errors
        return report

    def load(self, sources: Sequence[Path]) -> Tuple[List[BuildResult], List[Exception]]:
        claims = DestinationClaims()
        if self.config.gen_index:
            claims.claim(self.config.index_path, self.config.index_path)

        group = TaskGroup(max_workers=self.config.jobs, name="pagewright-load")
        collector = OrderedCollector(group.cancellation).start()
        try:
            for path in sources:
                group.spawn(self._build_single, path, group.cancellation, collector, claims)
            errors = self._wait(group)
        finally:
            results = collector.close()
        return results, errors

    def generate(self, results: Sequence[BuildResult]) -> List[Exception]:
        group = TaskGroup(max_workers=1, name="pagewright-generate")
        group.spawn(self._write_index, list(results))
        return self._wait(group)

    def _wait(self, group: TaskGroup) -> List[Exception]:
        try:
            return group.wait()
        except KeyboardInterrupt:
            LOGGER.warning("Interrupted, waiting for running workers to stop")
            group.cancel()
            group.wait()
            raise

    def _build_single(
        self,
        path: Path,
        token: CancellationToken,
        collector: OrderedCollector,
        claims: DestinationClaims,
    ) -> None:
        if token.is_cancelled():
            return

        text = read_text(path)
        stat = stat_path(path)
        tree = parse_document(text)
        meta = resolve_metadata(extract_metadata(tree, detach=True, source=path), path, stat)

        destination = self.output_dir / output_name(meta, path)
        claims.claim(destination, path)

        if token.is_cancelled():
            return
        if not self.config.force and not should_rebuild(stat.st_mtime_ns, destination):
            LOGGER.debug("Up to date: %s", destination)
            collector.submit(self._result(path, destination, stat, meta, rebuilt=False), token)
            return

        page = Page(source=path, meta=meta, output=destination.name)
        context = RenderContext(
            page=page,
            page_template=self.page_template,
            arena=self.arena,
            data=self.data,
        )
        html = render_document(tree, self.renderer_factory(self.config.style), context)

        if token.is_cancelled():
            return
        write_atomic(destination, html)
        collector.submit(self._result(path, destination, stat, meta, rebuilt=True), token)

    def _result(
        self,
        source: Path,
        destination: Path,
        source_stat: os.stat_result,
        meta: Metadata,
        *,
        rebuilt: bool,
    ) -> BuildResult:
        return BuildResult(
            source=source,
            destination=destination,
            source_mtime=_mtime(source_stat),
            destination_mtime=_mtime(stat_path(destination)),
            meta=meta,
            rebuilt=rebuilt,
        )

    def _write_index(self, results: List[BuildResult]) -> None:
        index_path = self.config.index_path
        try:
            html = self.index_template.render(pages=results, data=self.data)
        except TEMPLATE_FAILURES as exc:
            raise TemplateError(str(exc), index_path, stage="index") from exc
        write_atomic(index_path, html)
        LOGGER.info("Wrote index of %d pages to %s", len(results), index_path)
