"""Branch inventory command.

Runs the carry lane audit, then for every PR and feature branch lists the
commits missing from the integration reference and whether they would
reapply mechanically.

Exit codes: 0 clean, 2 attention needed (a required lane or any tracked
branch is missing commits), 3 configuration or backend error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from carry_audit.audit.inventory import run_inventory
from carry_audit.cli.helpers import (
    EXIT_FINDINGS,
    EXIT_SUCCESS,
    OutputFormat,
    console,
    fail,
    prepare_run,
)
from carry_audit.cli.ui import render_inventory, render_json
from carry_audit.errors import CarryAuditError


def inventory(
    integration_ref: Annotated[Optional[str], typer.Option("--integration-ref", help="Integration branch to audit against")] = None,
    trunk_ref: Annotated[Optional[str], typer.Option("--trunk-ref", help="Upstream trunk used as the PR baseline")] = None,
    required_lanes_file: Annotated[Optional[str], typer.Option("--required-lanes-file", help="Required-lanes policy file")] = None,
    output_format: Annotated[OutputFormat, typer.Option("--format", help="Output format: table or json")] = OutputFormat.TABLE,
    repo: Annotated[Optional[Path], typer.Option("--repo", help="Repository root (defaults to the current directory)")] = None,
) -> None:
    """Inventory missing commits on carry, PR and feature branches.

    Examples:
        carry-audit inventory
        carry-audit inventory --trunk-ref upstream/main --format json
    """
    repo_root, config, backend = prepare_run(
        repo,
        "inventory",
        output_format,
        integration_ref=integration_ref,
        trunk_ref=trunk_ref,
        required_lanes_file=required_lanes_file,
    )

    try:
        summary = run_inventory(config, backend, repo_root)
    except CarryAuditError as exc:
        fail(str(exc))

    if output_format == OutputFormat.JSON:
        print(render_json(summary.to_dict()))
    else:
        render_inventory(summary, console)

    raise typer.Exit(EXIT_FINDINGS if summary.attention_needed else EXIT_SUCCESS)


__all__ = ["inventory"]
