"""Core utilities: git preflight checks and the VCS backend layer."""

from .git_preflight import (
    GitPreflightIssue,
    GitPreflightResult,
    build_git_preflight_failure_payload,
    run_git_preflight,
)

__all__ = [
    "GitPreflightIssue",
    "GitPreflightResult",
    "build_git_preflight_failure_payload",
    "run_git_preflight",
]
