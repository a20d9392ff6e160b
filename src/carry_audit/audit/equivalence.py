"""Suppression of missing commits whose content is already integrated.

Two checks run per missing commit, cheaper first:

1. Supersession: the commit is, or is an ancestor of, a commit whose patch
   already landed. Its content was folded into that commit by a squash or
   rebase.
2. No net diff: every path the commit touches already has, in the
   integration reference, the blob the commit produced.

Results are memoized in a BranchMemo that lives for one branch only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from carry_audit.audit.models import CommitGap, MissingCommit
from carry_audit.core.vcs import VersionControlBackend

logger = logging.getLogger(__name__)


@dataclass
class BranchMemo:
    """Per-branch cache of suppression checks, keyed by full commit id."""

    superseded: dict[str, bool] = field(default_factory=dict)
    no_net_diff: dict[str, bool] = field(default_factory=dict)


def is_superseded(
    sha: str,
    landed: Iterable[str],
    backend: VersionControlBackend,
) -> bool:
    """Return True if sha equals, or is an ancestor of, any landed commit."""
    for landed_sha in landed:
        if sha == landed_sha:
            return True
        if backend.is_ancestor(sha, landed_sha):
            return True
    return False


def has_no_net_diff(sha: str, integration_ref: str, backend: VersionControlBackend) -> bool:
    """Return True if integration already holds the commit's result for every touched path."""
    for path in backend.changed_paths(sha):
        if backend.blob_identity(sha, path) != backend.blob_identity(integration_ref, path):
            return False
    return True


def filter_equivalent(
    gap: CommitGap,
    integration_ref: str,
    backend: VersionControlBackend,
    memo: BranchMemo | None = None,
) -> list[MissingCommit]:
    """Drop superseded and no-net-diff commits from gap.missing, keeping order.

    Surviving commits carry their subject line; when the equivalence marker
    had none, it is read from the backend.
    """
    memo = memo if memo is not None else BranchMemo()
    survivors: list[MissingCommit] = []

    for sha in gap.missing:
        superseded = memo.superseded.get(sha)
        if superseded is None:
            superseded = is_superseded(sha, gap.landed, backend)
            memo.superseded[sha] = superseded
        if superseded:
            logger.debug("Suppressing %s: superseded by a landed commit", sha)
            continue

        no_net_diff = memo.no_net_diff.get(sha)
        if no_net_diff is None:
            no_net_diff = has_no_net_diff(sha, integration_ref, backend)
            memo.no_net_diff[sha] = no_net_diff
        if no_net_diff:
            logger.debug("Suppressing %s: no net diff against %s", sha, integration_ref)
            continue

        subject = gap.subject_for(sha) or backend.commit_subject(sha)
        survivors.append(MissingCommit(sha=sha, subject=subject))

    return survivors


__all__ = ["BranchMemo", "filter_equivalent", "has_no_net_diff", "is_superseded"]
