"""Deterministic git preflight checks run before an audit."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import shlex

from carry_audit.core.vcs.git import run_git

__all__ = [
    "GitPreflightIssue",
    "GitPreflightResult",
    "run_git_preflight",
    "build_git_preflight_failure_payload",
]

PREFLIGHT_TIMEOUT = 15


@dataclass
class GitPreflightIssue:
    """Single preflight issue with optional remediation command."""

    code: str
    check: str
    message: str
    remediation: str
    command: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload = {
            "code": self.code,
            "check": self.check,
            "message": self.message,
            "remediation": self.remediation,
        }
        if self.command:
            payload["command"] = self.command
        return payload


@dataclass
class GitPreflightResult:
    """Result envelope for git preflight checks."""

    repo_root: Path
    errors: list[GitPreflightIssue] = field(default_factory=list)
    warnings: list[GitPreflightIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> GitPreflightIssue | None:
        return self.errors[0] if self.errors else None

    def remediation_commands(self) -> list[str]:
        commands: list[str] = []
        for issue in self.errors:
            if issue.command:
                commands.append(issue.command)
        return commands

    def to_dict(self) -> dict[str, object]:
        return {
            "repo_root": str(self.repo_root),
            "passed": self.passed,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


def _is_dubious_ownership(stderr: str) -> bool:
    text = stderr.lower()
    return "dubious ownership" in text or "safe.directory" in text


def _safe_directory_command(repo_root: Path) -> str:
    return f"git config --global --add safe.directory {shlex.quote(str(repo_root))}"


def _first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


def run_git_preflight(repo_root: Path, *, remote: str = "origin") -> GitPreflightResult:
    """Check that repo_root is a usable git work tree with the audited remote."""
    root = repo_root.resolve()
    result = GitPreflightResult(repo_root=root)

    repo_check = run_git(root, ["rev-parse", "--is-inside-work-tree"], timeout=PREFLIGHT_TIMEOUT)
    if repo_check.returncode != 0 or repo_check.stdout.strip().lower() != "true":
        if _is_dubious_ownership(repo_check.stderr):
            result.errors.append(
                GitPreflightIssue(
                    code="UNTRUSTED_REPOSITORY",
                    check="repository_trust",
                    message="Git rejected repository ownership trust (safe.directory).",
                    remediation="Mark the repository as trusted for this machine.",
                    command=_safe_directory_command(root),
                )
            )
        else:
            detail = _first_line(repo_check.stderr) or "Repository is not recognized by git."
            result.errors.append(
                GitPreflightIssue(
                    code="NOT_A_GIT_REPOSITORY",
                    check="repository_presence",
                    message=f"Git repository check failed: {detail}",
                    remediation="Run the audit from the repository root or pass --repo.",
                    command=f"cd {shlex.quote(str(root))} && git status",
                )
            )
        return result

    remote_check = run_git(root, ["remote", "get-url", remote], timeout=PREFLIGHT_TIMEOUT)
    if remote_check.returncode != 0:
        result.warnings.append(
            GitPreflightIssue(
                code="MISSING_REMOTE",
                check="remote_presence",
                message=f"Remote '{remote}' is not configured; no remote-tracking refs will be found.",
                remediation=f"Configure {remote} and fetch it before auditing.",
                command=f"git -C {shlex.quote(str(root))} remote add {shlex.quote(remote)} <url>",
            )
        )

    return result


def build_git_preflight_failure_payload(
    preflight: GitPreflightResult,
    *,
    command_name: str,
) -> dict[str, object]:
    """Build deterministic JSON payload for preflight failures."""
    primary = preflight.first_error
    message = primary.message if primary else "Git preflight failed."
    return {
        "error_code": "GIT_PREFLIGHT_FAILED",
        "error": message,
        "command": command_name,
        "repo_root": str(preflight.repo_root),
        "preflight": preflight.to_dict(),
        "remediation": preflight.remediation_commands(),
    }
