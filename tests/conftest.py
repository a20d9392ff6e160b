from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterator

import pytest

from carry_audit.config import AuditConfig


def run(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True)


@pytest.fixture()
def temp_repo(tmp_path: Path) -> Iterator[Path]:
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    run(["git", "init", "-q"], cwd=repo_dir)
    run(["git", "config", "user.name", "Carry Audit"], cwd=repo_dir)
    run(["git", "config", "user.email", "audit@example.com"], cwd=repo_dir)
    run(["git", "config", "commit.gpgsign", "false"], cwd=repo_dir)
    yield repo_dir


@pytest.fixture()
def commit_file(temp_repo: Path) -> Callable[[str, str, str], str]:
    """Write a file, commit it, and return the new commit id."""

    def _commit(path: str, content: str, message: str) -> str:
        target = temp_repo / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        run(["git", "add", path], cwd=temp_repo)
        run(["git", "commit", "-q", "-m", message], cwd=temp_repo)
        return run(["git", "rev-parse", "HEAD"], cwd=temp_repo).stdout.strip()

    return _commit


@pytest.fixture()
def audit_config() -> AuditConfig:
    return AuditConfig(
        integration_ref="origin/integration",
        trunk_ref="origin/main",
        required_lanes_file="docs/required-lanes.txt",
    )


@pytest.fixture()
def policy_repo(tmp_path: Path) -> Path:
    """Directory holding a required-lanes policy that requires carry/tests."""
    policy = tmp_path / "docs" / "required-lanes.txt"
    policy.parent.mkdir(parents=True)
    policy.write_text("carry/tests\n", encoding="utf-8")
    return tmp_path
