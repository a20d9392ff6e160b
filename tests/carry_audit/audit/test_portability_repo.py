"""Portability classification replayed through real git."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

import pytest

from carry_audit.audit.inventory import build_branch_item, run_inventory
from carry_audit.audit.models import BranchCategory, BranchRef, Portability
from carry_audit.config import AuditConfig
from carry_audit.core.vcs import GitBackend

pytestmark = pytest.mark.git_repo


def run(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True)


@pytest.fixture()
def branches(temp_repo: Path, commit_file: Callable[[str, str, str], str]) -> dict[str, str]:
    """Integration rewrote the beta line; one PR branch edits the same line.

    base -- tweak -- f1 -- f2    (origin/integration at tweak, origin/feat/clean)
        \\-- p -- q               (origin/pr/conflict)
    """
    base = commit_file("a.txt", "alpha\nbeta\ngamma\n", "Base")
    tweak = commit_file("a.txt", "alpha\nbeta integration\ngamma\n", "Integration tweak")
    commit_file("f1.txt", "one\n", "Add f1")
    f2 = commit_file("f2.txt", "two\n", "Add f2")

    run(["git", "checkout", "-q", "-b", "conflict-work", base], cwd=temp_repo)
    p = commit_file("p.txt", "p\n", "Add p")
    q = commit_file("a.txt", "alpha\nbeta feature\ngamma\n", "Edit beta")

    run(["git", "update-ref", "refs/remotes/origin/main", base], cwd=temp_repo)
    run(["git", "update-ref", "refs/remotes/origin/integration", tweak], cwd=temp_repo)
    run(["git", "update-ref", "refs/remotes/origin/feat/clean", f2], cwd=temp_repo)
    run(["git", "update-ref", "refs/remotes/origin/pr/conflict", q], cwd=temp_repo)
    run(["git", "update-ref", "refs/remotes/origin/carry/tests", tweak], cwd=temp_repo)
    return {"base": base, "tweak": tweak, "f2": f2, "p": p, "q": q}


def test_clean_branch_is_mechanical_ok(temp_repo: Path, branches: dict[str, str], audit_config: AuditConfig) -> None:
    backend = GitBackend(temp_repo)

    item = build_branch_item(BranchRef(BranchCategory.FEAT, "origin/feat/clean"), audit_config, backend)

    assert item.head_sha == branches["f2"]
    assert [commit.subject for commit in item.missing_commits] == ["Add f1", "Add f2"]
    assert item.portability == Portability.MECHANICAL_OK
    assert item.blocked_by_sha is None


def test_conflicting_commit_blocks_replay(temp_repo: Path, branches: dict[str, str], audit_config: AuditConfig) -> None:
    backend = GitBackend(temp_repo)

    item = build_branch_item(BranchRef(BranchCategory.PR, "origin/pr/conflict"), audit_config, backend)

    assert [commit.sha for commit in item.missing_commits] == [branches["p"], branches["q"]]
    assert item.portability == Portability.REVIEW_REQUIRED
    assert item.blocked_by_sha == branches["q"]


def test_replay_leaves_work_tree_untouched(temp_repo: Path, branches: dict[str, str], audit_config: AuditConfig) -> None:
    backend = GitBackend(temp_repo)
    head = run(["git", "rev-parse", "HEAD"], cwd=temp_repo).stdout
    status = run(["git", "status", "--porcelain"], cwd=temp_repo).stdout

    build_branch_item(BranchRef(BranchCategory.PR, "origin/pr/conflict"), audit_config, backend)

    assert run(["git", "rev-parse", "HEAD"], cwd=temp_repo).stdout == head
    assert run(["git", "status", "--porcelain"], cwd=temp_repo).stdout == status
    assert (temp_repo / "a.txt").read_text(encoding="utf-8") == "alpha\nbeta feature\ngamma\n"


def test_inventory_over_real_repository(temp_repo: Path, branches: dict[str, str], audit_config: AuditConfig) -> None:
    policy = temp_repo / "docs" / "required-lanes.txt"
    policy.parent.mkdir(parents=True)
    policy.write_text("carry/tests\n", encoding="utf-8")

    summary = run_inventory(audit_config, GitBackend(temp_repo), temp_repo)

    assert summary.carry.blocking_missing_count == 0
    assert [(item.ref, item.portability) for item in summary.pr] == [
        ("origin/pr/conflict", Portability.REVIEW_REQUIRED)
    ]
    assert [(item.ref, item.portability) for item in summary.feat] == [
        ("origin/feat/clean", Portability.MECHANICAL_OK)
    ]
    assert summary.missing_pr_commit_count == 2
