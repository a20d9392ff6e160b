"""
Git Backend
===========

GitBackend implements VersionControlBackend by shelling out to git. Every
capability is one git invocation run through ``run_git``, which normalizes
failures (missing executable, timeout) into a returncode so the backend can
decide whether a failure is fatal or a soft negative.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from carry_audit.errors import BackendCommandError, NotFoundError

from .types import ApplyOutcome, EquivalenceMarker, ScratchHandle

logger = logging.getLogger(__name__)

__all__ = ["GitBackend", "GitCommandResult", "run_git"]

DEFAULT_TIMEOUT = 60
_FULL_ID_PATTERN = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")
_COUNT_PATTERN = re.compile(r"[0-9]+")

# Exit codes synthesized by run_git for infrastructure failures.
_GIT_MISSING = 127
_GIT_TIMEOUT = 124


@dataclass
class GitCommandResult:
    returncode: int
    stdout: str
    stderr: str


GitRunner = Callable[..., GitCommandResult]


def run_git(
    repo_root: Path,
    args: list[str],
    *,
    env: dict[str, str] | None = None,
    input_text: str | None = None,
    timeout: int | None = DEFAULT_TIMEOUT,
) -> GitCommandResult:
    """Run a git command and normalize the failure shape for deterministic handling."""
    logger.debug("git %s", " ".join(args))
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=str(repo_root),
            env=env,
            input=input_text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
        return GitCommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
    except FileNotFoundError:
        return GitCommandResult(
            returncode=_GIT_MISSING,
            stdout="",
            stderr="git executable not found on PATH",
        )
    except subprocess.TimeoutExpired:
        return GitCommandResult(
            returncode=_GIT_TIMEOUT,
            stdout="",
            stderr=f"git command timed out: git {' '.join(args)}",
        )


def _split_lines(raw: str) -> list[str]:
    return [line.strip() for line in raw.splitlines() if line.strip()]


def _is_infrastructure_failure(result: GitCommandResult) -> bool:
    return result.returncode in (_GIT_MISSING, _GIT_TIMEOUT)


def _command_error(args: list[str], result: GitCommandResult) -> BackendCommandError:
    return BackendCommandError(
        "git command failed",
        command=["git", *args],
        returncode=result.returncode,
        stderr=result.stderr,
    )


class GitBackend:
    """VersionControlBackend backed by the git command line.

    Args:
        repo_root: Repository to run commands in.
        runner: Callable with the signature ``runner(args, *, env=None, input_text=None)``
            returning a GitCommandResult. Defaults to ``run_git`` bound to repo_root.
        timeout: Per-command timeout in seconds for the default runner.
    """

    def __init__(
        self,
        repo_root: Path,
        runner: GitRunner | None = None,
        timeout: int | None = DEFAULT_TIMEOUT,
    ):
        self.repo_root = repo_root
        self._runner = runner or functools.partial(run_git, repo_root, timeout=timeout)

    # ------------------------------------------------------------------
    # Command helpers
    # ------------------------------------------------------------------

    def _run(
        self,
        args: list[str],
        *,
        env: dict[str, str] | None = None,
        input_text: str | None = None,
    ) -> GitCommandResult:
        return self._runner(args, env=env, input_text=input_text)

    def _check(
        self,
        args: list[str],
        *,
        env: dict[str, str] | None = None,
        input_text: str | None = None,
    ) -> str:
        result = self._run(args, env=env, input_text=input_text)
        if result.returncode != 0:
            raise _command_error(args, result)
        return result.stdout

    @staticmethod
    def _scratch_env(handle: ScratchHandle) -> dict[str, str]:
        env = dict(os.environ)
        env["GIT_INDEX_FILE"] = str(handle.index_file)
        return env

    # ------------------------------------------------------------------
    # Ref and history queries
    # ------------------------------------------------------------------

    def list_refs(self, pattern: str) -> list[str]:
        raw = self._check(["for-each-ref", "--format=%(refname:short)", pattern])
        return _split_lines(raw)

    def divergence_counts(self, ref_a: str, ref_b: str) -> tuple[int, int]:
        args = ["rev-list", "--left-right", "--count", f"{ref_a}...{ref_b}"]
        raw = self._check(args)
        pieces = raw.split()
        if len(pieces) != 2 or not all(_COUNT_PATTERN.fullmatch(piece) for piece in pieces):
            raise BackendCommandError(
                f"Unexpected divergence output for {ref_b}: {raw.strip()!r}",
                command=["git", *args],
            )
        return int(pieces[0]), int(pieces[1])

    def resolve_full_id(self, ref: str) -> str:
        args = ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"]
        result = self._run(args)
        if _is_infrastructure_failure(result):
            raise _command_error(args, result)
        if result.returncode != 0:
            raise NotFoundError(
                f"Cannot resolve {ref} to a commit",
                command=["git", *args],
                returncode=result.returncode,
                stderr=result.stderr,
            )
        full_id = result.stdout.strip()
        if not _FULL_ID_PATTERN.match(full_id):
            raise BackendCommandError(
                f"Unexpected commit id for {ref}: {full_id!r}",
                command=["git", *args],
            )
        return full_id

    def equivalence_markers(self, base_ref: str, branch_ref: str) -> list[EquivalenceMarker]:
        raw = self._check(["cherry", "-v", base_ref, branch_ref])
        markers: list[EquivalenceMarker] = []
        for line in raw.splitlines():
            trimmed = line.strip()
            if not (trimmed.startswith("+ ") or trimmed.startswith("- ")):
                continue
            payload = trimmed[2:].strip()
            sha, _, subject = payload.partition(" ")
            if not sha:
                continue
            markers.append(
                EquivalenceMarker(sha=sha, is_missing=trimmed[0] == "+", subject=subject.strip())
            )
        return markers

    def list_commits_exclusive(self, base_ref: str, branch_ref: str) -> list[str]:
        raw = self._check(["rev-list", "--reverse", "--no-merges", f"{base_ref}..{branch_ref}"])
        return _split_lines(raw)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self._run(["merge-base", "--is-ancestor", ancestor, descendant])
        if result.returncode == 0:
            return True
        if result.returncode != 1:
            logger.warning(
                "Ancestry check %s -> %s failed (exit %s); treating as not an ancestor",
                ancestor,
                descendant,
                result.returncode,
            )
        return False

    def changed_paths(self, commit: str) -> list[str]:
        raw = self._check(["show", "--pretty=", "--name-only", commit])
        return _split_lines(raw)

    def blob_identity(self, ref: str, path: str) -> str | None:
        args = ["rev-parse", "--verify", "--quiet", f"{ref}:{path}"]
        result = self._run(args)
        if _is_infrastructure_failure(result):
            raise _command_error(args, result)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def commit_subject(self, commit: str) -> str:
        return self._check(["show", "-s", "--format=%s", commit]).strip()

    # ------------------------------------------------------------------
    # Scratch index simulation
    # ------------------------------------------------------------------

    def materialize_tree_into_scratch(self, ref: str) -> ScratchHandle:
        directory = Path(tempfile.mkdtemp(prefix="carry-audit-"))
        handle = ScratchHandle(ref=ref, directory=directory, index_file=directory / "index")
        try:
            self._check(["read-tree", ref], env=self._scratch_env(handle))
        except BackendCommandError:
            self.dispose_scratch(handle)
            raise
        logger.debug("Materialized %s into scratch index %s", ref, handle.index_file)
        return handle

    def apply_patch_to_scratch(self, handle: ScratchHandle, commit: str) -> ApplyOutcome:
        env = self._scratch_env(handle)
        patch = self._check(
            ["format-patch", "-1", "--stdout", "--full-index", "--no-stat", commit],
            env=env,
        )
        args = ["apply", "--cached", "--3way", "--whitespace=nowarn"]
        result = self._run(args, env=env, input_text=patch)
        if _is_infrastructure_failure(result):
            raise _command_error(args, result)
        if result.returncode != 0:
            logger.debug("Patch for %s does not apply: %s", commit, result.stderr.strip())
            return ApplyOutcome.CONFLICT
        return ApplyOutcome.APPLIED

    def dispose_scratch(self, handle: ScratchHandle) -> None:
        shutil.rmtree(handle.directory, ignore_errors=True)
