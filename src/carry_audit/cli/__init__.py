"""CLI helpers exposed for other modules."""

from .helpers import (
    EXIT_CONFIG_ERROR,
    EXIT_FINDINGS,
    EXIT_SUCCESS,
    OutputFormat,
    console,
    err_console,
)
from .ui import render_inventory, render_json, render_lane_audit

__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_FINDINGS",
    "EXIT_SUCCESS",
    "OutputFormat",
    "console",
    "err_console",
    "render_inventory",
    "render_json",
    "render_lane_audit",
]
