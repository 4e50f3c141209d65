"""Command line interface for pagewright."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from pagewright.build.builder import SiteBuilder, find_sources
from pagewright.config import BuildConfig
from pagewright.errors import BuildError
from pagewright.render.highlight import DEFAULT_STYLE

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)
app = typer.Typer(help="pagewright - render a directory of Markdown into HTML pages and an index")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _print_errors(phase: str, errors: List[Exception]) -> None:
    err_console.print(f"Error while {phase}:", style="bold red")
    for error in errors:
        err_console.print(f"    {error}", markup=False, highlight=False)


@app.command()
def build(
    source: Path = typer.Argument(Path("."), help="Directory containing Markdown sources."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output directory, defaults to SOURCE"),
    page: Optional[Path] = typer.Option(None, "--page", help="Page template file"),
    index: Optional[Path] = typer.Option(None, "--index", help="Index template file"),
    data: Optional[Path] = typer.Option(None, "--data", help="YAML or JSON site data file"),
    genindex: bool = typer.Option(True, "--genindex/--no-genindex", help="Generate an index page"),
    style: str = typer.Option(DEFAULT_STYLE, "--style", help="Pygments style for code blocks"),
    force: bool = typer.Option(False, "--force", help="Rebuild pages even when outputs are newer"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", help="Maximum concurrent workers"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build every Markdown document in SOURCE."""
    _setup_logging(verbose)
    config = BuildConfig(
        source_dir=source,
        output_dir=out,
        page_template=page,
        index_template=index,
        data_file=data,
        gen_index=genindex,
        style=style,
        force=force,
        jobs=jobs,
    )

    try:
        builder = SiteBuilder.from_config(config)
        sources = find_sources(config)
    except BuildError as exc:
        err_console.print(f"Error: {exc}", markup=False, highlight=False)
        raise typer.Exit(code=1)

    if not sources:
        console.print("[yellow]No Markdown documents found.[/yellow]")

    try:
        report = builder.build(sources)
    except KeyboardInterrupt:
        err_console.print("Interrupted.", style="bold red")
        raise typer.Exit(code=130)
    except BuildError as exc:
        err_console.print(f"Error: {exc}", markup=False, highlight=False)
        raise typer.Exit(code=1)

    if report.load_errors:
        _print_errors("loading", report.load_errors)
    if report.generate_errors:
        _print_errors("generating", report.generate_errors)
    if not report.ok:
        raise typer.Exit(code=1)

    console.print(f"Built: {report.built}, up to date: {report.skipped}")
    if report.index_written:
        console.print(f"Index: [bold]{config.index_path}[/bold]")
