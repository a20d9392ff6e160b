"""
carry-audit - fork maintenance audits for carry lanes and tracked branches.

Usage:
    carry-audit lanes [--integration-ref REF] [--format table|json]
    carry-audit inventory [--trunk-ref REF] [--format table|json]
"""

from __future__ import annotations

import logging
import sys

import typer

from carry_audit.cli.commands import inventory, lanes
from carry_audit.cli.helpers import EXIT_CONFIG_ERROR, EXIT_SUCCESS, PROG_NAME

__version__ = "0.3.0"

app = typer.Typer(
    name=PROG_NAME,
    help="Audit carry lanes and PR/feature branches against the integration branch.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git invocations and per-branch results"),
) -> None:
    """Audit carry lanes and PR/feature branches against the integration branch."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


app.command("lanes")(lanes)
app.command("inventory")(inventory)


def _usage_error_type() -> type[Exception]:
    """Return the UsageError class of the click that typer runs commands on.

    Newer typer releases bundle their own click, so the class is taken from
    the exceptions typer itself exports.
    """
    return next(cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "UsageError")


def main(argv: list[str] | None = None) -> None:
    """Console entry point.

    Click reports usage errors with exit code 2, which would read as "findings
    present"; they are remapped to the configuration error code instead.
    """
    command = typer.main.get_command(app)
    try:
        exit_code = command.main(args=argv, prog_name=PROG_NAME, standalone_mode=False)
    except _usage_error_type() as exc:
        exc.show()
        sys.exit(EXIT_CONFIG_ERROR)
    except typer.Abort:
        sys.exit(1)
    sys.exit(exit_code if isinstance(exit_code, int) else EXIT_SUCCESS)


if __name__ == "__main__":
    main()
