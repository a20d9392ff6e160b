"""
VCS Protocol
============

The narrow capability surface the audit engine needs from a version-control
backend. Each capability maps to one backend command.

Failure semantics:
    - ``is_ancestor`` never raises for a failed check; failure means False.
    - ``apply_patch_to_scratch`` reports conflicts as ``ApplyOutcome.CONFLICT``.
    - ``blob_identity`` returns None when the path does not exist at the ref.
    - ``resolve_full_id`` raises ``NotFoundError`` for unresolvable refs.
    - Every other failure raises ``BackendCommandError``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import ApplyOutcome, EquivalenceMarker, ScratchHandle


@runtime_checkable
class VersionControlBackend(Protocol):
    """Capabilities consumed by the lane auditor and branch inventory."""

    def list_refs(self, pattern: str) -> list[str]:
        """Return short ref names matching a ref pattern."""
        ...

    def divergence_counts(self, ref_a: str, ref_b: str) -> tuple[int, int]:
        """Return (commits only in ref_a, commits only in ref_b)."""
        ...

    def resolve_full_id(self, ref: str) -> str:
        """Return the full commit id for a ref or abbreviated id."""
        ...

    def equivalence_markers(self, base_ref: str, branch_ref: str) -> list[EquivalenceMarker]:
        """Report, per commit unique to branch_ref, whether base_ref has an equivalent patch."""
        ...

    def list_commits_exclusive(self, base_ref: str, branch_ref: str) -> list[str]:
        """Return non-merge commits in branch_ref but not base_ref, oldest first."""
        ...

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Return True if ancestor is an ancestor of descendant."""
        ...

    def changed_paths(self, commit: str) -> list[str]:
        """Return the paths touched by a commit."""
        ...

    def blob_identity(self, ref: str, path: str) -> str | None:
        """Return the blob id of path at ref, or None if absent."""
        ...

    def commit_subject(self, commit: str) -> str:
        """Return the subject line of a commit."""
        ...

    def materialize_tree_into_scratch(self, ref: str) -> ScratchHandle:
        """Create a scratch index populated with ref's tree."""
        ...

    def apply_patch_to_scratch(self, handle: ScratchHandle, commit: str) -> ApplyOutcome:
        """Apply commit's patch onto the scratch index."""
        ...

    def dispose_scratch(self, handle: ScratchHandle) -> None:
        """Release a scratch index. Safe to call more than once."""
        ...


__all__ = ["VersionControlBackend"]
