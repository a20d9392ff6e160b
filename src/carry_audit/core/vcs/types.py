"""
VCS Types
=========

Value types exchanged between the audit engine and a version-control backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class ApplyOutcome(StrEnum):
    """Result of applying one commit's patch onto a scratch index."""

    APPLIED = "applied"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class EquivalenceMarker:
    """One line of patch-equivalence output for a branch-unique commit.

    ``sha`` may be abbreviated; callers must resolve it to a full id before
    using it as a key. ``is_missing`` is False when an equivalent patch is
    already present in the base ref.
    """

    sha: str
    is_missing: bool
    subject: str = ""


@dataclass(frozen=True)
class ScratchHandle:
    """A disposable index populated from a ref's tree.

    Attributes:
        ref: The ref whose tree seeded the index.
        directory: Temporary directory owning the index file.
        index_file: Path used as ``GIT_INDEX_FILE`` for scratch operations.
    """

    ref: str
    directory: Path
    index_file: Path


__all__ = ["ApplyOutcome", "EquivalenceMarker", "ScratchHandle"]
