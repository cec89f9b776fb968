"""Tests for output directory resolution."""

from datetime import date
from pathlib import Path

import pytest

from repo_changes.core.exceptions import ConfigurationError
from repo_changes.pipelines.output import OutputPathResolver


@pytest.mark.unit
class TestOutputPathResolver:
    """Tests for OutputPathResolver."""

    def test_default_path_is_created(self, tmp_path: Path) -> None:
        resolver = OutputPathResolver(today=date(2024, 3, 5))
        resolved = resolver.resolve(tmp_path)

        assert resolved == tmp_path.resolve() / "ChangedFilesFromRepository_20240305"
        assert resolved.is_dir()

    def test_default_path_may_pre_exist_empty(self, tmp_path: Path) -> None:
        existing = tmp_path / "ChangedFilesFromRepository_20240305"
        (existing / "empty-subdir").mkdir(parents=True)
        resolved = OutputPathResolver(today=date(2024, 3, 5)).resolve(tmp_path)
        assert resolved == existing.resolve()

    def test_default_path_non_empty_is_rejected(self, tmp_path: Path) -> None:
        existing = tmp_path / "ChangedFilesFromRepository_20240305"
        existing.mkdir()
        (existing / "a.txt").write_text("a\n")

        with pytest.raises(ConfigurationError):
            OutputPathResolver(today=date(2024, 3, 5)).resolve(tmp_path)

    def test_explicit_path_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="does not exist"):
            OutputPathResolver().resolve(tmp_path, tmp_path / "missing")

    def test_explicit_path_must_be_empty_recursively(self, tmp_path: Path) -> None:
        destination = tmp_path / "dest"
        (destination / "nested").mkdir(parents=True)
        (destination / "nested" / "left-over.txt").write_text("x\n")

        with pytest.raises(ConfigurationError, match="not empty"):
            OutputPathResolver().resolve(tmp_path, destination)

    def test_explicit_empty_path_is_used(self, tmp_path: Path) -> None:
        destination = tmp_path / "dest"
        (destination / "nested").mkdir(parents=True)
        assert OutputPathResolver().resolve(tmp_path, destination) == destination.resolve()

    def test_planned_path_does_not_create(self, tmp_path: Path) -> None:
        resolver = OutputPathResolver(today=date(2024, 3, 5))
        planned = resolver.planned_path(tmp_path)
        assert planned.name == "ChangedFilesFromRepository_20240305"
        assert not planned.exists()
