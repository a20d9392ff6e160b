"""In-memory VersionControlBackend for audit engine tests."""

from __future__ import annotations

import re
from pathlib import Path

from carry_audit.core.vcs import ApplyOutcome, EquivalenceMarker, ScratchHandle
from carry_audit.errors import NotFoundError

_FULL_SHA = re.compile(r"^[0-9a-f]{40}$")


def sha(char: str) -> str:
    """Build a full 40-character commit id from one repeated hex digit."""
    return char * 40


class FakeBackend:
    """Scriptable backend that records every call it receives.

    Attributes mirror the capabilities: refs by pattern, divergence by lane
    ref, abbreviated ids, equivalence markers by branch, exclusive commit
    lists by (base, branch), ancestry pairs, changed paths, blobs by
    (ref, path), subjects, and commits whose patches conflict.
    """

    def __init__(
        self,
        *,
        refs: dict[str, list[str]] | None = None,
        divergence: dict[str, tuple[int, int]] | None = None,
        full_ids: dict[str, str] | None = None,
        markers: dict[str, list[EquivalenceMarker]] | None = None,
        exclusive: dict[tuple[str, str], list[str]] | None = None,
        ancestry: set[tuple[str, str]] | None = None,
        changed: dict[str, list[str]] | None = None,
        blobs: dict[tuple[str, str], str] | None = None,
        subjects: dict[str, str] | None = None,
        conflicts: set[str] | None = None,
    ):
        self.refs = refs or {}
        self.divergence = divergence or {}
        self.full_ids = full_ids or {}
        self.markers = markers or {}
        self.exclusive = exclusive or {}
        self.ancestry = ancestry or set()
        self.changed = changed or {}
        self.blobs = blobs or {}
        self.subjects = subjects or {}
        self.conflicts = conflicts or set()

        self.calls: list[tuple[str, ...]] = []
        self.applied: list[str] = []
        self.open_scratches: int = 0
        self.disposed: int = 0

    def _record(self, *call: str) -> None:
        self.calls.append(call)

    def calls_named(self, name: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == name]

    def list_refs(self, pattern: str) -> list[str]:
        self._record("list_refs", pattern)
        return list(self.refs.get(pattern, []))

    def divergence_counts(self, ref_a: str, ref_b: str) -> tuple[int, int]:
        self._record("divergence_counts", ref_a, ref_b)
        return self.divergence.get(ref_b, (0, 0))

    def resolve_full_id(self, ref: str) -> str:
        self._record("resolve_full_id", ref)
        if ref in self.full_ids:
            return self.full_ids[ref]
        if _FULL_SHA.match(ref):
            return ref
        raise NotFoundError(f"Cannot resolve {ref} to a commit")

    def equivalence_markers(self, base_ref: str, branch_ref: str) -> list[EquivalenceMarker]:
        self._record("equivalence_markers", base_ref, branch_ref)
        return list(self.markers.get(branch_ref, []))

    def list_commits_exclusive(self, base_ref: str, branch_ref: str) -> list[str]:
        self._record("list_commits_exclusive", base_ref, branch_ref)
        return list(self.exclusive.get((base_ref, branch_ref), []))

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        self._record("is_ancestor", ancestor, descendant)
        return (ancestor, descendant) in self.ancestry

    def changed_paths(self, commit: str) -> list[str]:
        self._record("changed_paths", commit)
        return list(self.changed.get(commit, []))

    def blob_identity(self, ref: str, path: str) -> str | None:
        self._record("blob_identity", ref, path)
        return self.blobs.get((ref, path))

    def commit_subject(self, commit: str) -> str:
        self._record("commit_subject", commit)
        return self.subjects.get(commit, "")

    def materialize_tree_into_scratch(self, ref: str) -> ScratchHandle:
        self._record("materialize_tree_into_scratch", ref)
        self.open_scratches += 1
        directory = Path("/nonexistent/scratch")
        return ScratchHandle(ref=ref, directory=directory, index_file=directory / "index")

    def apply_patch_to_scratch(self, handle: ScratchHandle, commit: str) -> ApplyOutcome:
        self._record("apply_patch_to_scratch", commit)
        if commit in self.conflicts:
            return ApplyOutcome.CONFLICT
        self.applied.append(commit)
        return ApplyOutcome.APPLIED

    def dispose_scratch(self, handle: ScratchHandle) -> None:
        self._record("dispose_scratch", handle.ref)
        self.open_scratches -= 1
        self.disposed += 1
