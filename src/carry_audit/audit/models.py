"""Value objects produced by lane audits and branch inventories.

Every object here is created fresh per run and never mutated afterwards.
``to_dict`` methods produce the camelCase summary schema consumed by JSON
output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class LaneClassification(StrEnum):
    """How a carry lane relates to the integration reference."""

    CONTAINED = "CONTAINED"
    ADVISORY_MISSING = "ADVISORY_MISSING"
    BLOCKING_MISSING = "BLOCKING_MISSING"


class BranchCategory(StrEnum):
    """Tracked branch kinds; the category decides the baseline ref."""

    PR = "pr"
    FEAT = "feat"


class Portability(StrEnum):
    """Whether a branch's missing commits reapply cleanly onto integration."""

    CONTAINED = "CONTAINED"
    MECHANICAL_OK = "MECHANICAL_OK"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


def classify_lane(required: bool, right: int) -> LaneClassification:
    """Classify a lane from its policy membership and unintegrated commit count."""
    if right > 0:
        return LaneClassification.BLOCKING_MISSING if required else LaneClassification.ADVISORY_MISSING
    return LaneClassification.CONTAINED


@dataclass(frozen=True)
class LaneAudit:
    """Divergence of one carry lane from the integration reference.

    ``left`` counts commits only on the integration side, ``right`` commits
    only on the lane.
    """

    lane: str
    required: bool
    left: int
    right: int
    classification: LaneClassification

    def to_dict(self) -> dict[str, Any]:
        return {
            "lane": self.lane,
            "required": self.required,
            "left": self.left,
            "right": self.right,
            "classification": str(self.classification),
        }


@dataclass(frozen=True)
class AuditSummary:
    """Lane audit result across every discovered carry lane."""

    integration_ref: str
    required_lanes_file: str
    required_lanes: tuple[str, ...]
    lanes: tuple[LaneAudit, ...]

    def _count(self, classification: LaneClassification) -> int:
        return sum(1 for lane in self.lanes if lane.classification == classification)

    @property
    def blocking_missing_count(self) -> int:
        return self._count(LaneClassification.BLOCKING_MISSING)

    @property
    def advisory_missing_count(self) -> int:
        return self._count(LaneClassification.ADVISORY_MISSING)

    @property
    def contained_count(self) -> int:
        return self._count(LaneClassification.CONTAINED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "integrationRef": self.integration_ref,
            "requiredLanesFile": self.required_lanes_file,
            "requiredLanes": list(self.required_lanes),
            "lanes": [lane.to_dict() for lane in self.lanes],
            "blockingMissingCount": self.blocking_missing_count,
            "advisoryMissingCount": self.advisory_missing_count,
            "containedCount": self.contained_count,
        }


@dataclass(frozen=True)
class BranchRef:
    """A tracked PR or feature branch."""

    category: BranchCategory
    ref: str


@dataclass(frozen=True)
class MarkerState:
    """Patch-equivalence state of one commit, keyed by its full id."""

    is_missing: bool
    subject: str = ""


@dataclass(frozen=True)
class CommitGap:
    """Commits on a branch but not its baseline, split by equivalence state.

    Attributes:
        baseline: Ref the branch was compared against.
        candidates: Non-merge commits on the branch only, oldest first.
        missing: Candidates with no equivalent patch in integration, oldest first.
        landed: Candidates whose patch already has an equivalent in integration.
        markers: Full commit id -> equivalence state.
    """

    baseline: str
    candidates: tuple[str, ...]
    missing: tuple[str, ...]
    landed: tuple[str, ...]
    markers: dict[str, MarkerState] = field(default_factory=dict)

    def subject_for(self, sha: str) -> str:
        state = self.markers.get(sha)
        return state.subject if state else ""


@dataclass(frozen=True)
class MissingCommit:
    sha: str
    subject: str

    def to_dict(self) -> dict[str, Any]:
        return {"sha": self.sha, "subject": self.subject}


@dataclass(frozen=True)
class PortabilityResult:
    """Outcome of replaying missing commits onto the integration tree.

    ``blocked_by_sha`` is only set for REVIEW_REQUIRED; commits after it were
    never attempted.
    """

    portability: Portability
    blocked_by_sha: str | None = None


@dataclass(frozen=True)
class BranchInventoryItem:
    category: BranchCategory
    ref: str
    head_sha: str
    missing_commits: tuple[MissingCommit, ...]
    portability: Portability
    blocked_by_sha: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "category": str(self.category),
            "ref": self.ref,
            "headSha": self.head_sha,
            "missingCommits": [commit.to_dict() for commit in self.missing_commits],
            "portability": str(self.portability),
        }
        if self.blocked_by_sha:
            payload["blockedBySha"] = self.blocked_by_sha
        return payload


@dataclass(frozen=True)
class InventorySummary:
    """Lane audit plus per-branch gap inventory."""

    integration_ref: str
    required_lanes_file: str
    carry: AuditSummary
    pr: tuple[BranchInventoryItem, ...]
    feat: tuple[BranchInventoryItem, ...]

    @property
    def missing_pr_commit_count(self) -> int:
        return sum(len(item.missing_commits) for item in self.pr)

    @property
    def missing_feat_commit_count(self) -> int:
        return sum(len(item.missing_commits) for item in self.feat)

    @property
    def attention_needed(self) -> bool:
        """True when a required lane or any tracked branch has missing commits.

        Advisory lane gaps never set this.
        """
        return (
            self.carry.blocking_missing_count > 0
            or self.missing_pr_commit_count > 0
            or self.missing_feat_commit_count > 0
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "integrationRef": self.integration_ref,
            "requiredLanesFile": self.required_lanes_file,
            "carry": self.carry.to_dict(),
            "pr": [item.to_dict() for item in self.pr],
            "feat": [item.to_dict() for item in self.feat],
            "missingPrCommitCount": self.missing_pr_commit_count,
            "missingFeatCommitCount": self.missing_feat_commit_count,
        }


__all__ = [
    "AuditSummary",
    "BranchCategory",
    "BranchInventoryItem",
    "BranchRef",
    "CommitGap",
    "InventorySummary",
    "LaneAudit",
    "LaneClassification",
    "MarkerState",
    "MissingCommit",
    "Portability",
    "PortabilityResult",
    "classify_lane",
]
