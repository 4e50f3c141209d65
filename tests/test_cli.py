"""Tests for CLI commands."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from pagewright.cli import _setup_logging, app


runner = CliRunner()


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("pagewright.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("pagewright.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestBuildCommand:
    """Tests for the build command."""

    def test_build_site(self, tmp_path: Path) -> None:
        """Builds pages and the index into the output directory."""
        src = tmp_path / "src"
        src.mkdir()
        _write(src / "a.md", "<!--meta\ntitle: Alpha\n-->\n\nHello.\n")
        out = tmp_path / "out"

        result = runner.invoke(app, [str(src), "--out", str(out)])

        assert result.exit_code == 0, result.output
        assert "Built: 1, up to date: 0" in result.output
        assert (out / "alpha.html").exists()
        assert (out / "index.html").exists()

    def test_second_run_up_to_date(self, tmp_path: Path) -> None:
        """Reports documents that did not need rebuilding."""
        _write(tmp_path / "a.md", "Hello.\n")
        os.utime(tmp_path / "a.md", (1_500_000_000, 1_500_000_000))
        out = tmp_path / "out"
        runner.invoke(app, [str(tmp_path), "-o", str(out)])

        result = runner.invoke(app, [str(tmp_path), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Built: 0, up to date: 1" in result.output

    def test_no_genindex(self, tmp_path: Path) -> None:
        """Skips the index when asked."""
        _write(tmp_path / "a.md", "Hello.\n")
        out = tmp_path / "out"

        result = runner.invoke(app, [str(tmp_path), "-o", str(out), "--no-genindex"])

        assert result.exit_code == 0, result.output
        assert not (out / "index.html").exists()
        assert "Index:" not in result.output

    def test_no_documents(self, tmp_path: Path) -> None:
        """Warns when the source has no Markdown files."""
        result = runner.invoke(app, [str(tmp_path), "-o", str(tmp_path / "out")])

        assert result.exit_code == 0
        assert "No Markdown documents found" in result.output

    def test_missing_source(self, tmp_path: Path) -> None:
        """Exits with an error for a missing source directory."""
        result = runner.invoke(app, [str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "source directory does not exist" in result.output

    def test_missing_template(self, tmp_path: Path) -> None:
        """Exits with an error for a missing page template."""
        result = runner.invoke(app, [str(tmp_path), "--page", str(tmp_path / "nope.html")])

        assert result.exit_code == 1
        assert "page template not found" in result.output

    def test_unknown_style(self, tmp_path: Path) -> None:
        """Exits with an error for an unknown highlight style."""
        result = runner.invoke(app, [str(tmp_path), "--style", "no-such-style"])

        assert result.exit_code == 1
        assert "no-such-style" in result.output

    def test_document_error(self, tmp_path: Path) -> None:
        """Lists load errors and exits non-zero."""
        _write(tmp_path / "bad.md", "<!--meta\ntitle: [oops\n-->\n")
        out = tmp_path / "out"

        result = runner.invoke(app, [str(tmp_path), "-o", str(out)])

        assert result.exit_code == 1
        assert "Error while loading" in result.output
        assert "bad.md" in result.output
        assert not (out / "index.html").exists()

    def test_interrupt(self, tmp_path: Path) -> None:
        """Exits with 130 when interrupted."""
        _write(tmp_path / "a.md", "Hello.\n")

        with patch("pagewright.cli.SiteBuilder.build", side_effect=KeyboardInterrupt):
            result = runner.invoke(app, [str(tmp_path), "-o", str(tmp_path / "out")])

        assert result.exit_code == 130
