"""Tests for git repository helpers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from leakview.utils.git import find_repository_root, is_git_repo, resolve_repository_target


class TestFindRepositoryRoot:
    """Tests for find_repository_root."""

    def test_walks_up_to_git_directory(self, tmp_path: Path):
        """Test that the nearest directory holding .git is returned."""
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        assert find_repository_root(nested) == tmp_path.resolve()

    def test_git_file_counts(self, tmp_path: Path):
        """Test that worktrees (a .git file) are recognised."""
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n")
        assert find_repository_root(tmp_path) == tmp_path.resolve()

    def test_starting_from_file(self, tmp_path: Path):
        """Test that a file start point uses its directory."""
        (tmp_path / ".git").mkdir()
        source = tmp_path / "main.py"
        source.write_text("")
        assert find_repository_root(source) == tmp_path.resolve()

    def test_defaults_to_working_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test that the search starts from the working directory."""
        (tmp_path / ".git").mkdir()
        monkeypatch.chdir(tmp_path)
        assert find_repository_root() == tmp_path.resolve()

    def test_is_git_repo(self, tmp_path: Path):
        """Test the boolean helper."""
        (tmp_path / "repo" / ".git").mkdir(parents=True)
        assert is_git_repo(tmp_path / "repo") is True


class TestResolveRepositoryTarget:
    """Tests for resolve_repository_target."""

    def test_explicit_path_wins(self, tmp_path: Path):
        """Test that an explicit target is used as-is."""
        assert resolve_repository_target(tmp_path) == tmp_path.resolve()

    def test_falls_back_to_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test the fallback when no repository encloses the working directory."""
        monkeypatch.chdir(tmp_path)
        with patch("leakview.utils.git.find_repository_root", return_value=None):
            assert resolve_repository_target() == tmp_path.resolve()
