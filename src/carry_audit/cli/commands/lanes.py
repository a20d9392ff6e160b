"""Carry lane gap audit command.

Lists every ``carry/*`` lane on the remote, checks that each lane named in the
required-lanes policy exists, and reports how many lane commits are missing
from the integration reference.

Exit codes: 0 clean, 2 a required lane is missing commits, 3 configuration
or backend error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from carry_audit.audit.lanes import run_lane_audit
from carry_audit.cli.helpers import (
    EXIT_FINDINGS,
    EXIT_SUCCESS,
    OutputFormat,
    console,
    fail,
    prepare_run,
)
from carry_audit.cli.ui import render_json, render_lane_audit
from carry_audit.errors import CarryAuditError


def lanes(
    integration_ref: Annotated[Optional[str], typer.Option("--integration-ref", help="Integration branch to audit against")] = None,
    required_lanes_file: Annotated[Optional[str], typer.Option("--required-lanes-file", help="Required-lanes policy file")] = None,
    output_format: Annotated[OutputFormat, typer.Option("--format", help="Output format: table or json")] = OutputFormat.TABLE,
    repo: Annotated[Optional[Path], typer.Option("--repo", help="Repository root (defaults to the current directory)")] = None,
) -> None:
    """Audit carry lanes against the integration reference.

    Examples:
        carry-audit lanes
        carry-audit lanes --integration-ref origin/integration --format json
    """
    repo_root, config, backend = prepare_run(
        repo,
        "lanes",
        output_format,
        integration_ref=integration_ref,
        required_lanes_file=required_lanes_file,
    )

    try:
        summary = run_lane_audit(config, backend, repo_root)
    except CarryAuditError as exc:
        fail(str(exc))

    if output_format == OutputFormat.JSON:
        print(render_json(summary.to_dict()))
    else:
        render_lane_audit(summary, console)

    raise typer.Exit(EXIT_FINDINGS if summary.blocking_missing_count > 0 else EXIT_SUCCESS)


__all__ = ["lanes"]
