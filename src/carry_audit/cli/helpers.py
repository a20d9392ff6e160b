"""Shared console, exit codes and run setup for CLI commands."""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console

from carry_audit.config import AuditConfig, load_config
from carry_audit.cli.ui import render_json
from carry_audit.core.git_preflight import build_git_preflight_failure_payload, run_git_preflight
from carry_audit.core.vcs import VersionControlBackend, get_backend
from carry_audit.errors import CarryAuditError

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

PROG_NAME = "carry-audit"

EXIT_SUCCESS = 0
EXIT_FINDINGS = 2
EXIT_CONFIG_ERROR = 3


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"


def fail(message: str, hint: str | None = None) -> NoReturn:
    """Report a fatal configuration or backend error and exit with code 3."""
    err_console.print(f"{PROG_NAME}: {message}", markup=False, highlight=False, soft_wrap=True)
    if hint:
        err_console.print(f"[dim]{hint}[/dim]")
    raise typer.Exit(EXIT_CONFIG_ERROR)


def prepare_run(
    repo: Path | None,
    command_name: str,
    output_format: OutputFormat = OutputFormat.TABLE,
    **overrides: str | None,
) -> tuple[Path, AuditConfig, VersionControlBackend]:
    """Resolve repository root, configuration and backend for one run.

    Runs git preflight first so configuration problems are reported against a
    known-good repository. Any failure exits with code 3; with JSON output a
    failed preflight is reported as a JSON payload on stdout.
    """
    repo_root = (repo or Path.cwd()).resolve()

    try:
        config = load_config(repo_root).with_overrides(**overrides)
    except CarryAuditError as exc:
        fail(str(exc))

    preflight = run_git_preflight(repo_root, remote=config.remote)
    if not preflight.passed:
        if output_format == OutputFormat.JSON:
            payload = build_git_preflight_failure_payload(
                preflight, command_name=f"{PROG_NAME} {command_name}"
            )
            print(render_json(payload))
            raise typer.Exit(EXIT_CONFIG_ERROR)
        issue = preflight.first_error
        assert issue is not None
        fail(issue.message, hint=issue.command or issue.remediation)
    for warning in preflight.warnings:
        logger.warning("%s", warning.message)

    try:
        backend = get_backend(repo_root)
    except CarryAuditError as exc:
        fail(str(exc))

    return repo_root, config, backend


__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_FINDINGS",
    "EXIT_SUCCESS",
    "OutputFormat",
    "PROG_NAME",
    "console",
    "err_console",
    "fail",
    "prepare_run",
]
