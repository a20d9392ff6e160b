"""Mechanical portability check for a branch's missing commits.

Missing commits are replayed oldest-first onto a scratch index seeded from
the integration tree. The scan stops at the first commit that does not apply;
commits after it are never attempted, so their applicability is unknown.

This only proves textual applicability. It says nothing about whether the
result builds or passes tests.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, Sequence

from carry_audit.audit.models import MissingCommit, Portability, PortabilityResult
from carry_audit.core.vcs import ApplyOutcome, ScratchHandle, VersionControlBackend

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def scratch_index(backend: VersionControlBackend, ref: str) -> Iterator[ScratchHandle]:
    """Yield a scratch index seeded from ref, disposing it on every exit path."""
    handle = backend.materialize_tree_into_scratch(ref)
    try:
        yield handle
    finally:
        backend.dispose_scratch(handle)


def classify_portability(
    missing: Sequence[MissingCommit],
    integration_ref: str,
    backend: VersionControlBackend,
) -> PortabilityResult:
    """Classify whether missing commits reapply cleanly, in order, onto integration."""
    if not missing:
        return PortabilityResult(Portability.CONTAINED)

    with scratch_index(backend, integration_ref) as handle:
        for commit in missing:
            outcome = backend.apply_patch_to_scratch(handle, commit.sha)
            if outcome == ApplyOutcome.CONFLICT:
                logger.debug("Replay onto %s blocked by %s", integration_ref, commit.sha)
                return PortabilityResult(Portability.REVIEW_REQUIRED, blocked_by_sha=commit.sha)

    return PortabilityResult(Portability.MECHANICAL_OK)


__all__ = ["classify_portability", "scratch_index"]
