"""Commit gap resolution for one tracked branch.

PR branches are pre-integration proposals and are compared against the
unmodified trunk; feature branches are post-integration work and are compared
against the integration reference. Patch equivalence is always judged against
the integration reference.
"""

from __future__ import annotations

import logging

from carry_audit.audit.models import BranchCategory, BranchRef, CommitGap, MarkerState
from carry_audit.core.vcs import VersionControlBackend

logger = logging.getLogger(__name__)


def baseline_for(branch: BranchRef, integration_ref: str, trunk_ref: str) -> str:
    """Return the ref a branch's candidate commits are listed against."""
    if branch.category == BranchCategory.PR:
        return trunk_ref
    return integration_ref


def resolve_markers(
    backend: VersionControlBackend,
    integration_ref: str,
    branch_ref: str,
) -> dict[str, MarkerState]:
    """Map full commit ids to their patch-equivalence state against integration.

    Identifiers from the backend may be abbreviated and are resolved to full
    ids before being used as keys.
    """
    markers: dict[str, MarkerState] = {}
    for marker in backend.equivalence_markers(integration_ref, branch_ref):
        full_id = backend.resolve_full_id(marker.sha)
        markers[full_id] = MarkerState(is_missing=marker.is_missing, subject=marker.subject)
    return markers


def resolve_commit_gap(
    branch: BranchRef,
    integration_ref: str,
    trunk_ref: str,
    backend: VersionControlBackend,
) -> CommitGap:
    """List the branch's candidate commits and split them by equivalence state.

    A candidate is missing only when the equivalence markers flag it as
    missing. Candidates the markers do not mention at all are treated as not
    missing.
    """
    baseline = baseline_for(branch, integration_ref, trunk_ref)
    candidates = tuple(backend.list_commits_exclusive(baseline, branch.ref))
    markers = resolve_markers(backend, integration_ref, branch.ref)

    missing: list[str] = []
    landed: list[str] = []
    for sha in candidates:
        state = markers.get(sha)
        if state is None:
            logger.debug("%s: candidate %s has no equivalence marker; not counted", branch.ref, sha)
            continue
        if state.is_missing:
            missing.append(sha)
        else:
            landed.append(sha)

    return CommitGap(
        baseline=baseline,
        candidates=candidates,
        missing=tuple(missing),
        landed=tuple(landed),
        markers=markers,
    )


__all__ = ["baseline_for", "resolve_commit_gap", "resolve_markers"]
