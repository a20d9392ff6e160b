"""Required-lanes policy parsing.

The policy file lists one carry lane per line. Lines end in LF or CRLF; no
other character breaks a line. Text after the first ``#`` is a comment, blank
lines are ignored, and duplicates collapse to their first occurrence. A single
malformed line invalidates the whole policy; the error lists every offending
line so the file can be fixed in one pass.

Example::

    # lanes that must be integrated before release
    carry/tests
    carry/release   # packaging tweaks
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from carry_audit.errors import ConfigurationError, PolicyError

logger = logging.getLogger(__name__)

CARRY_LANE_PATTERN = re.compile(r"^carry/[A-Za-z0-9][A-Za-z0-9._/-]*$")
_LINE_BREAK = re.compile(r"\r?\n")


def is_valid_carry_lane_name(lane: str) -> bool:
    """Return True if lane is a well-formed ``carry/<name>`` branch name."""
    if not CARRY_LANE_PATTERN.match(lane):
        return False
    if ".." in lane or lane.endswith("/"):
        return False
    return True


def parse_required_lanes(raw: str) -> tuple[str, ...]:
    """Parse policy text into an ordered, deduplicated tuple of lane names.

    Raises:
        PolicyError: One or more non-comment lines are not valid lane names.
    """
    lanes: list[str] = []
    seen: set[str] = set()
    invalid: list[str] = []

    for index, line in enumerate(_LINE_BREAK.split(raw), start=1):
        cleaned = line.split("#", 1)[0].strip()
        if not cleaned:
            continue
        if not is_valid_carry_lane_name(cleaned):
            invalid.append(f"line {index}: {cleaned}")
            continue
        if cleaned in seen:
            continue
        seen.add(cleaned)
        lanes.append(cleaned)

    if invalid:
        raise PolicyError(invalid)

    return tuple(lanes)


def load_required_lanes(policy_file: Path) -> tuple[str, ...]:
    """Read and parse a policy file.

    Raises:
        ConfigurationError: The file cannot be read or is malformed.
    """
    try:
        with open(policy_file, "r", encoding="utf-8", newline="") as f:
            raw = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read required lanes file {policy_file}: {exc}") from exc
    lanes = parse_required_lanes(raw)
    logger.debug("Loaded %d required lane(s) from %s", len(lanes), policy_file)
    return lanes


__all__ = [
    "CARRY_LANE_PATTERN",
    "is_valid_carry_lane_name",
    "load_required_lanes",
    "parse_required_lanes",
]
