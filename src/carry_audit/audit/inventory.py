"""Branch inventory across carry lanes, PR branches and feature branches.

Runs the lane audit once, then resolves each tracked branch start to finish
before moving to the next:

    resolve_commit_gap -> filter_equivalent -> classify_portability

Branches are processed sequentially; the scratch index and memo caches of
one branch are never visible to another.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from carry_audit.audit.equivalence import BranchMemo, filter_equivalent
from carry_audit.audit.lanes import run_lane_audit
from carry_audit.audit.models import (
    BranchCategory,
    BranchInventoryItem,
    BranchRef,
    InventorySummary,
)
from carry_audit.audit.portability import classify_portability
from carry_audit.audit.resolver import resolve_commit_gap
from carry_audit.config import AuditConfig
from carry_audit.core.vcs import VersionControlBackend

logger = logging.getLogger(__name__)


def list_refs_multi(backend: VersionControlBackend, patterns: Iterable[str]) -> list[str]:
    """Union of refs matching any pattern, deduplicated and sorted."""
    refs: set[str] = set()
    for pattern in patterns:
        refs.update(backend.list_refs(pattern))
    return sorted(refs)


def discover_branches(
    backend: VersionControlBackend,
    config: AuditConfig,
) -> tuple[list[BranchRef], list[BranchRef]]:
    """Return (pr branches, feat branches) present on the configured remotes."""
    pr = [BranchRef(BranchCategory.PR, ref) for ref in list_refs_multi(backend, config.pr_ref_globs)]
    feat = [
        BranchRef(BranchCategory.FEAT, ref)
        for ref in list_refs_multi(backend, config.feat_ref_globs)
    ]
    return pr, feat


def build_branch_item(
    branch: BranchRef,
    config: AuditConfig,
    backend: VersionControlBackend,
) -> BranchInventoryItem:
    """Resolve, filter and classify one branch."""
    head_sha = backend.resolve_full_id(branch.ref)
    gap = resolve_commit_gap(branch, config.integration_ref, config.trunk_ref, backend)
    memo = BranchMemo()
    missing = filter_equivalent(gap, config.integration_ref, backend, memo)
    result = classify_portability(missing, config.integration_ref, backend)

    logger.info(
        "%s %s: %d missing of %d candidate(s), %s",
        branch.category,
        branch.ref,
        len(missing),
        len(gap.candidates),
        result.portability,
    )
    return BranchInventoryItem(
        category=branch.category,
        ref=branch.ref,
        head_sha=head_sha,
        missing_commits=tuple(missing),
        portability=result.portability,
        blocked_by_sha=result.blocked_by_sha,
    )


def run_inventory(
    config: AuditConfig,
    backend: VersionControlBackend,
    repo_root: Path,
) -> InventorySummary:
    """Audit carry lanes and inventory every tracked PR and feature branch."""
    carry = run_lane_audit(config, backend, repo_root)
    pr_branches, feat_branches = discover_branches(backend, config)

    pr_items = tuple(build_branch_item(branch, config, backend) for branch in pr_branches)
    feat_items = tuple(build_branch_item(branch, config, backend) for branch in feat_branches)

    return InventorySummary(
        integration_ref=config.integration_ref,
        required_lanes_file=config.required_lanes_file,
        carry=carry,
        pr=pr_items,
        feat=feat_items,
    )


__all__ = ["build_branch_item", "discover_branches", "list_refs_multi", "run_inventory"]
