"""
VCS Detection Module
====================

Tool detection and the get_backend() factory function.
"""

from __future__ import annotations

import shutil
import subprocess
from functools import lru_cache
from pathlib import Path

from carry_audit.errors import BackendCommandError

from .git import DEFAULT_TIMEOUT, GitBackend


@lru_cache(maxsize=1)
def is_git_available() -> bool:
    """
    Check if git is installed and working.

    Returns:
        True if git is installed and responds to --version, False otherwise.
    """
    if shutil.which("git") is None:
        return False
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            timeout=5,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


def get_backend(repo_root: Path, timeout: int | None = DEFAULT_TIMEOUT) -> GitBackend:
    """
    Factory function returning the backend used for audit runs.

    Args:
        repo_root: Repository the backend runs commands in.
        timeout: Per-command timeout in seconds.

    Raises:
        BackendCommandError: git is not installed.
    """
    if not is_git_available():
        raise BackendCommandError("git is not available. Please install git.")
    return GitBackend(repo_root, timeout=timeout)


def _clear_detection_cache() -> None:
    """Clear cached detection results. For testing purposes only."""
    is_git_available.cache_clear()
