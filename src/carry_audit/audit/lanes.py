"""Carry lane gap audit.

Validates the required-lanes policy against the carry lanes that exist on the
remote, then classifies every discovered lane by how many of its commits are
not yet in the integration reference.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from carry_audit.audit.models import AuditSummary, LaneAudit, classify_lane
from carry_audit.config import AuditConfig
from carry_audit.core.vcs import VersionControlBackend
from carry_audit.errors import RequiredLaneMissingError
from carry_audit.policy import load_required_lanes

logger = logging.getLogger(__name__)


def discover_carry_lanes(backend: VersionControlBackend, config: AuditConfig | None = None) -> list[str]:
    """Return ``carry/*`` lane names present on the configured remote, sorted, without the remote prefix."""
    config = config or AuditConfig()
    prefix = f"{config.remote}/"
    lanes = [
        ref[len(prefix):] if ref.startswith(prefix) else ref
        for ref in backend.list_refs(config.carry_ref_glob)
    ]
    return sorted(lanes)


def audit_lanes(
    required_lanes: Iterable[str],
    discovered_lanes: Iterable[str],
    integration_ref: str,
    backend: VersionControlBackend,
    *,
    remote: str = "origin",
    required_lanes_file: str = "",
) -> AuditSummary:
    """Classify every discovered lane against the integration reference.

    Raises:
        RequiredLaneMissingError: A required lane is not among the discovered
            lanes. Raised before any divergence is computed.
    """
    required = tuple(required_lanes)
    lanes = tuple(discovered_lanes)
    present = set(lanes)

    for lane in required:
        if lane not in present:
            raise RequiredLaneMissingError(lane, remote)

    required_set = set(required)
    audits: list[LaneAudit] = []
    for lane in lanes:
        left, right = backend.divergence_counts(integration_ref, f"{remote}/{lane}")
        is_required = lane in required_set
        audit = LaneAudit(
            lane=lane,
            required=is_required,
            left=left,
            right=right,
            classification=classify_lane(is_required, right),
        )
        logger.debug("Lane %s: left=%d right=%d -> %s", lane, left, right, audit.classification)
        audits.append(audit)

    return AuditSummary(
        integration_ref=integration_ref,
        required_lanes_file=required_lanes_file,
        required_lanes=required,
        lanes=tuple(audits),
    )


def run_lane_audit(
    config: AuditConfig,
    backend: VersionControlBackend,
    repo_root: Path,
) -> AuditSummary:
    """Load the policy named by config and audit every carry lane on the remote."""
    policy_path = Path(config.required_lanes_file)
    if not policy_path.is_absolute():
        policy_path = repo_root / policy_path
    required = load_required_lanes(policy_path)
    discovered = discover_carry_lanes(backend, config)
    logger.info(
        "Auditing %d carry lane(s) against %s (%d required)",
        len(discovered),
        config.integration_ref,
        len(required),
    )
    return audit_lanes(
        required,
        discovered,
        config.integration_ref,
        backend,
        remote=config.remote,
        required_lanes_file=config.required_lanes_file,
    )


__all__ = ["audit_lanes", "discover_carry_lanes", "run_lane_audit"]
