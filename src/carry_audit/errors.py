"""Error taxonomy for carry-audit runs.

Two fatal channels exist:

- ``ConfigurationError``: the inputs of a run are unusable (malformed policy
  file, bad configuration, a required lane that does not exist upstream).
- ``BackendCommandError``: the version-control backend failed, or produced
  output that cannot be interpreted, on a call where failure has no valid
  soft meaning.

Soft negatives (an ancestry check that fails, a patch that does not apply)
are never raised; backends report them as plain return values.
"""

from __future__ import annotations

__all__ = [
    "CarryAuditError",
    "ConfigurationError",
    "PolicyError",
    "RequiredLaneMissingError",
    "BackendCommandError",
    "NotFoundError",
]


class CarryAuditError(Exception):
    """Base class for all fatal carry-audit errors."""


class ConfigurationError(CarryAuditError):
    """Raised when configuration, CLI input, or policy input is unusable."""


class PolicyError(ConfigurationError):
    """Raised when the required-lanes policy contains malformed entries."""

    def __init__(self, invalid_lines: list[str]):
        self.invalid_lines = list(invalid_lines)
        super().__init__(
            "Malformed required lane names in policy file: "
            f"{', '.join(self.invalid_lines)}. Expected carry/<name>."
        )


class RequiredLaneMissingError(ConfigurationError):
    """Raised when a lane named by the policy does not exist upstream."""

    def __init__(self, lane: str, remote: str = "origin"):
        self.lane = lane
        self.remote = remote
        super().__init__(f"Required lane {lane} was not found on {remote}.")


class BackendCommandError(CarryAuditError):
    """Raised when a backend command fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
        detail = message
        if self.command:
            detail = f"{detail} (command: {' '.join(self.command)}"
            if returncode is not None:
                detail = f"{detail}, exit {returncode}"
            detail = f"{detail})"
        first_line = _first_line(stderr)
        if first_line:
            detail = f"{detail}: {first_line}"
        super().__init__(detail)


class NotFoundError(BackendCommandError):
    """Raised when a ref or object cannot be resolved by the backend."""


def _first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""
