"""Tests for build configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from pagewright.config import INDEX_NAME, BuildConfig
from pagewright.errors import ConfigError


class TestBuildConfig:
    """Test BuildConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        config = BuildConfig()

        assert config.source_dir == Path(".")
        assert config.output_dir == Path(".")
        assert config.gen_index is True
        assert config.style == "monokai"
        assert config.force is False
        assert config.jobs is None

    def test_output_defaults_to_source(self, tmp_path: Path) -> None:
        """Should write next to the sources unless told otherwise."""
        config = BuildConfig(source_dir=tmp_path)

        assert config.output_dir == tmp_path
        assert config.index_path == tmp_path / INDEX_NAME

    def test_accepts_strings(self, tmp_path: Path) -> None:
        """Should convert string paths."""
        config = BuildConfig(source_dir=str(tmp_path), output_dir=str(tmp_path / "out"))

        assert config.output_dir == tmp_path / "out"

    def test_validate_ok(self, tmp_path: Path) -> None:
        """Should accept an existing source directory."""
        BuildConfig(source_dir=tmp_path).validate()

    def test_missing_source(self, tmp_path: Path) -> None:
        """Should reject a missing source directory."""
        with pytest.raises(ConfigError, match="source directory"):
            BuildConfig(source_dir=tmp_path / "missing").validate()

    @pytest.mark.parametrize("field", ["page_template", "index_template", "data_file"])
    def test_missing_files(self, tmp_path: Path, field: str) -> None:
        """Should reject template and data paths that do not exist."""
        config = BuildConfig(source_dir=tmp_path, **{field: tmp_path / "missing"})

        with pytest.raises(ConfigError, match="not found"):
            config.validate()

    def test_unknown_style(self, tmp_path: Path) -> None:
        """Should reject unknown highlight styles."""
        with pytest.raises(ConfigError, match="style"):
            BuildConfig(source_dir=tmp_path, style="no-such-style").validate()

    def test_bad_jobs(self, tmp_path: Path) -> None:
        """Should reject fewer than one worker."""
        with pytest.raises(ConfigError, match="jobs"):
            BuildConfig(source_dir=tmp_path, jobs=0).validate()

    def test_resolve_output_dir_creates(self, tmp_path: Path) -> None:
        """Should create the output directory."""
        config = BuildConfig(source_dir=tmp_path, output_dir=tmp_path / "a" / "b")

        assert config.resolve_output_dir().is_dir()

    def test_output_path_rederived(self, tmp_path: Path) -> None:
        """Should fall back to the source directory when output_dir is cleared."""
        config = BuildConfig(source_dir=tmp_path, output_dir=tmp_path / "out")
        config.output_dir = None

        assert config.output_path == tmp_path
        assert config.index_path == tmp_path / INDEX_NAME
