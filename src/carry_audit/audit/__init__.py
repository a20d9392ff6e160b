"""Audit subpackage: carry lane gaps and branch portability.

Modules:
    models: Value objects and the lane classification rule
    lanes: Required-lane policy check and carry lane divergence
    resolver: Candidate and missing commits for one branch
    equivalence: Supersession and no-net-diff suppression
    portability: Ordered patch replay onto a scratch index
    inventory: Composition across all tracked branches
"""

from __future__ import annotations

from .equivalence import BranchMemo, filter_equivalent
from .inventory import run_inventory
from .lanes import audit_lanes, run_lane_audit
from .models import (
    AuditSummary,
    BranchCategory,
    BranchInventoryItem,
    BranchRef,
    CommitGap,
    InventorySummary,
    LaneAudit,
    LaneClassification,
    MissingCommit,
    Portability,
    PortabilityResult,
    classify_lane,
)
from .portability import classify_portability
from .resolver import resolve_commit_gap

__all__ = [
    "AuditSummary",
    "BranchCategory",
    "BranchInventoryItem",
    "BranchMemo",
    "BranchRef",
    "CommitGap",
    "InventorySummary",
    "LaneAudit",
    "LaneClassification",
    "MissingCommit",
    "Portability",
    "PortabilityResult",
    "audit_lanes",
    "classify_lane",
    "classify_portability",
    "filter_equivalent",
    "resolve_commit_gap",
    "run_inventory",
    "run_lane_audit",
]
