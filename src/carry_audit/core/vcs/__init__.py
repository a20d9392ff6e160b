"""
VCS Abstraction Package
=======================

The version-control capability surface used by the audit engine, and its
git implementation.

Usage:
    from carry_audit.core.vcs import VersionControlBackend, get_backend

    backend = get_backend(repo_root)
    lanes = backend.list_refs("refs/remotes/origin/carry/*")
"""

from __future__ import annotations

# Types
from .types import (
    ApplyOutcome,
    EquivalenceMarker,
    ScratchHandle,
)

# Protocol
from .protocol import VersionControlBackend

# Implementation
from .git import GitBackend, GitCommandResult, run_git
from .detection import get_backend, is_git_available

# Exceptions
from carry_audit.errors import BackendCommandError, NotFoundError

__all__ = [
    # Types
    "ApplyOutcome",
    "EquivalenceMarker",
    "ScratchHandle",
    # Protocol
    "VersionControlBackend",
    # Implementation
    "GitBackend",
    "GitCommandResult",
    "run_git",
    "get_backend",
    "is_git_available",
    # Exceptions
    "BackendCommandError",
    "NotFoundError",
]
