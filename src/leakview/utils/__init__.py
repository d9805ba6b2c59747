"""Utility modules for leakview."""

from leakview.utils.git import (
    find_repository_root,
    is_git_repo,
    resolve_repository_target,
)

__all__ = [
    "find_repository_root",
    "is_git_repo",
    "resolve_repository_target",
]
