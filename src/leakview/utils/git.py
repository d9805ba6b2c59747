"""Git utilities for leakview.

Repository scans default to the repository enclosing the working directory.
The lookup only inspects the filesystem, so it works without git installed.
"""

from __future__ import annotations

from pathlib import Path


def find_repository_root(start: Path | None = None) -> Path | None:
    """
    Find the root of the git repository containing ``start``.

    Parameters:
        start: Directory (or file) to start from; defaults to the working directory.

    Returns:
        The first directory, walking upwards, that holds a ``.git`` entry, or None.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        # .git is a file for worktrees and submodules
        if (directory / ".git").exists():
            return directory
    return None


def is_git_repo(path: Path) -> bool:
    """
    Check if the given path is inside a git repository.

    Parameters:
        path: Path to check.

    Returns:
        True if path is inside a git repository, False otherwise.
    """
    return find_repository_root(path) is not None


def resolve_repository_target(path: Path | None = None) -> Path:
    """
    Decide which directory a repository scan should target.

    Parameters:
        path: Explicit target. When None, the enclosing repository root is used,
            falling back to the working directory.

    Returns:
        Absolute path to scan.
    """
    if path is not None:
        return path.resolve()
    return find_repository_root() or Path.cwd().resolve()
