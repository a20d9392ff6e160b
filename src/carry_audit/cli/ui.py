"""Rich rendering for lane audits and branch inventories."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from carry_audit.audit.models import (
    AuditSummary,
    BranchInventoryItem,
    InventorySummary,
    LaneClassification,
    Portability,
)

SHORT_SHA = 12

_CLASSIFICATION_STYLES = {
    LaneClassification.CONTAINED: "green",
    LaneClassification.ADVISORY_MISSING: "yellow",
    LaneClassification.BLOCKING_MISSING: "bold red",
}

_PORTABILITY_STYLES = {
    Portability.CONTAINED: "green",
    Portability.MECHANICAL_OK: "cyan",
    Portability.REVIEW_REQUIRED: "bold red",
}


def _styled(value: str, style: str) -> str:
    return f"[{style}]{escape(value)}[/{style}]"


def render_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2)


def _print_header(summary: AuditSummary | InventorySummary, console: Console) -> None:
    console.print(f"[bold]Integration Ref:[/bold] {escape(summary.integration_ref)}")
    console.print(f"[bold]Required Lanes File:[/bold] {escape(summary.required_lanes_file)}")
    console.print()


def render_lane_audit(summary: AuditSummary, console: Console) -> None:
    """Print the carry lane table and classification totals."""
    _print_header(summary, console)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Lane", style="cyan", no_wrap=True)
    table.add_column("Required")
    table.add_column("Left", justify="right")
    table.add_column("Right", justify="right")
    table.add_column("Classification", no_wrap=True)

    for lane in summary.lanes:
        table.add_row(
            escape(lane.lane),
            "yes" if lane.required else "no",
            str(lane.left),
            str(lane.right),
            _styled(str(lane.classification), _CLASSIFICATION_STYLES[lane.classification]),
        )

    console.print(table)
    console.print()
    console.print(
        f"BLOCKING_MISSING={summary.blocking_missing_count} "
        f"ADVISORY_MISSING={summary.advisory_missing_count} "
        f"CONTAINED={summary.contained_count}"
    )


def _describe_missing(items: list[BranchInventoryItem], console: Console) -> None:
    for item in items:
        console.print()
        console.print(f"# {escape(item.ref)} ({item.portability})")
        for commit in item.missing_commits:
            console.print(f"- {commit.sha[:SHORT_SHA]} {escape(commit.subject)}", soft_wrap=True)


def render_inventory(summary: InventorySummary, console: Console) -> None:
    """Print the branch inventory table and the missing commits of each branch."""
    _print_header(summary, console)
    console.print(
        f"Carry blocking missing: {summary.carry.blocking_missing_count} "
        f"(advisory missing: {summary.carry.advisory_missing_count})"
    )
    console.print()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category", style="dim")
    table.add_column("Ref", style="cyan")
    table.add_column("Head", no_wrap=True)
    table.add_column("Missing", justify="right")
    table.add_column("Portability", no_wrap=True)
    table.add_column("BlockedBy", no_wrap=True)

    for item in (*summary.pr, *summary.feat):
        table.add_row(
            str(item.category),
            escape(item.ref),
            item.head_sha[:SHORT_SHA],
            str(len(item.missing_commits)),
            _styled(str(item.portability), _PORTABILITY_STYLES[item.portability]),
            item.blocked_by_sha[:SHORT_SHA] if item.blocked_by_sha else "",
        )

    console.print(table)
    console.print()

    missing_pr = [item for item in summary.pr if item.missing_commits]
    missing_feat = [item for item in summary.feat if item.missing_commits]
    console.print(
        f"Missing PR commits: {summary.missing_pr_commit_count} across {len(missing_pr)} branches"
    )
    console.print(
        f"Missing feat commits: {summary.missing_feat_commit_count} "
        f"across {len(missing_feat)} branches"
    )

    _describe_missing(missing_pr, console)
    _describe_missing(missing_feat, console)


__all__ = ["render_inventory", "render_json", "render_lane_audit"]
