"""End-to-end inventory tests over an in-memory backend."""

from __future__ import annotations

from pathlib import Path

import pytest

from carry_audit.audit.inventory import (
    build_branch_item,
    discover_branches,
    list_refs_multi,
    run_inventory,
)
from carry_audit.audit.models import BranchCategory, BranchRef, Portability
from carry_audit.config import AuditConfig
from carry_audit.core.vcs import EquivalenceMarker
from carry_audit.errors import RequiredLaneMissingError
from tests.carry_audit.fakes import FakeBackend, sha

INTEGRATION = "origin/integration"
TRUNK = "origin/main"
CARRY_GLOB = "refs/remotes/origin/carry/*"
PR_GLOB = "refs/remotes/origin/pr/*"
FEAT_ORIGIN_GLOB = "refs/remotes/origin/feat/*"
FEAT_SHARED_GLOB = "refs/remotes/shared/feat/*"

PR_REF = "origin/pr/example"
FEAT_REF = "shared/feat/example"
PR_HEAD, FEAT_HEAD = sha("e"), sha("f")
P1, P2 = sha("1"), sha("2")
F1, F2, F3 = sha("4"), sha("5"), sha("6")


def _scenario(**overrides) -> FakeBackend:
    options = dict(
        refs={
            CARRY_GLOB: ["origin/carry/tests", "origin/carry/docs"],
            PR_GLOB: [PR_REF],
            FEAT_SHARED_GLOB: [FEAT_REF],
        },
        divergence={"origin/carry/tests": (4, 0), "origin/carry/docs": (0, 2)},
        full_ids={PR_REF: PR_HEAD, FEAT_REF: FEAT_HEAD, "1111111": P1, "4444444": F1},
        exclusive={
            (TRUNK, PR_REF): [P1, P2],
            (INTEGRATION, FEAT_REF): [F1, F2, F3],
        },
        markers={
            PR_REF: [
                EquivalenceMarker("1111111", is_missing=True, subject="Fix parser"),
                EquivalenceMarker(P2, is_missing=False, subject="Already landed"),
            ],
            FEAT_REF: [
                EquivalenceMarker("4444444", is_missing=True, subject="Feature one"),
                EquivalenceMarker(F2, is_missing=True, subject="Feature two"),
                EquivalenceMarker(F3, is_missing=True, subject="Feature three"),
            ],
        },
        changed={P1: ["parser.py"], F1: ["a.py"], F2: ["b.py"], F3: ["c.py"]},
        blobs={
            (P1, "parser.py"): "new",
            (INTEGRATION, "parser.py"): "old",
            (F1, "a.py"): "a1",
            (F2, "b.py"): "b1",
            (F3, "c.py"): "c1",
        },
        conflicts={F2},
    )
    options.update(overrides)
    return FakeBackend(**options)


def test_list_refs_multi_unions_and_sorts() -> None:
    backend = FakeBackend(
        refs={
            FEAT_ORIGIN_GLOB: ["origin/feat/b", "origin/feat/a"],
            FEAT_SHARED_GLOB: ["shared/feat/a", "origin/feat/a"],
        }
    )

    refs = list_refs_multi(backend, [FEAT_ORIGIN_GLOB, FEAT_SHARED_GLOB])

    assert refs == ["origin/feat/a", "origin/feat/b", "shared/feat/a"]


def test_discover_branches_uses_configured_globs(audit_config: AuditConfig) -> None:
    backend = _scenario()

    pr, feat = discover_branches(backend, audit_config)

    assert pr == [BranchRef(BranchCategory.PR, PR_REF)]
    assert feat == [BranchRef(BranchCategory.FEAT, FEAT_REF)]
    patterns = [call[1] for call in backend.calls_named("list_refs")]
    assert patterns == [PR_GLOB, FEAT_ORIGIN_GLOB, FEAT_SHARED_GLOB]


def test_pr_branch_item(audit_config: AuditConfig) -> None:
    backend = _scenario()

    item = build_branch_item(BranchRef(BranchCategory.PR, PR_REF), audit_config, backend)

    assert item.head_sha == PR_HEAD
    assert [commit.sha for commit in item.missing_commits] == [P1]
    assert item.missing_commits[0].subject == "Fix parser"
    assert item.portability == Portability.MECHANICAL_OK
    assert item.blocked_by_sha is None


def test_feat_branch_item_blocked_by_first_conflict(audit_config: AuditConfig) -> None:
    backend = _scenario()

    item = build_branch_item(BranchRef(BranchCategory.FEAT, FEAT_REF), audit_config, backend)

    assert [commit.sha for commit in item.missing_commits] == [F1, F2, F3]
    assert item.portability == Portability.REVIEW_REQUIRED
    assert item.blocked_by_sha == F2
    assert F3 not in [call[1] for call in backend.calls_named("apply_patch_to_scratch")]


def test_run_inventory_end_to_end(policy_repo: Path, audit_config: AuditConfig) -> None:
    backend = _scenario()

    summary = run_inventory(audit_config, backend, policy_repo)

    assert summary.carry.blocking_missing_count == 0
    assert summary.carry.advisory_missing_count == 1
    assert summary.missing_pr_commit_count == 1
    assert summary.missing_feat_commit_count == 3
    assert summary.attention_needed is True
    assert backend.open_scratches == 0

    payload = summary.to_dict()
    assert payload["integrationRef"] == INTEGRATION
    assert payload["pr"][0]["ref"] == PR_REF
    assert payload["pr"][0]["portability"] == "MECHANICAL_OK"
    assert "blockedBySha" not in payload["pr"][0]
    assert payload["feat"][0]["blockedBySha"] == F2


def test_superseded_and_no_net_diff_branches_are_clean(
    policy_repo: Path, audit_config: AuditConfig
) -> None:
    backend = _scenario(
        ancestry={(P1, P2)},
        blobs={
            (F1, "a.py"): "same-a",
            (INTEGRATION, "a.py"): "same-a",
            (F2, "b.py"): "same-b",
            (INTEGRATION, "b.py"): "same-b",
            (F3, "c.py"): "same-c",
            (INTEGRATION, "c.py"): "same-c",
        },
    )

    summary = run_inventory(audit_config, backend, policy_repo)

    assert [item.portability for item in summary.pr] == [Portability.CONTAINED]
    assert [item.portability for item in summary.feat] == [Portability.CONTAINED]
    assert summary.attention_needed is False
    assert backend.calls_named("materialize_tree_into_scratch") == []


def test_missing_required_lane_aborts_before_branches(
    policy_repo: Path, audit_config: AuditConfig
) -> None:
    backend = _scenario(refs={CARRY_GLOB: ["origin/carry/docs"], PR_GLOB: [PR_REF]})

    with pytest.raises(RequiredLaneMissingError):
        run_inventory(audit_config, backend, policy_repo)

    assert backend.calls_named("list_commits_exclusive") == []
