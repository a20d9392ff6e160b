"""Audit configuration helpers.

Settings are read from an optional ``.carry-audit.yaml`` at the repository
root. Only the ``audit`` section is consulted; unrelated sections are ignored.
Command-line options override file values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from carry_audit.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".carry-audit.yaml"

DEFAULT_REMOTE = "origin"
DEFAULT_INTEGRATION_REF = "origin/integration"
DEFAULT_TRUNK_REF = "origin/main"
DEFAULT_REQUIRED_LANES_FILE = "docs/required-lanes.txt"
SHARED_FEAT_REF_GLOB = "refs/remotes/shared/feat/*"


def default_pr_ref_globs(remote: str) -> tuple[str, ...]:
    return (f"refs/remotes/{remote}/pr/*",)


def default_feat_ref_globs(remote: str) -> tuple[str, ...]:
    return (f"refs/remotes/{remote}/feat/*", SHARED_FEAT_REF_GLOB)


DEFAULT_PR_REF_GLOBS = default_pr_ref_globs(DEFAULT_REMOTE)
DEFAULT_FEAT_REF_GLOBS = default_feat_ref_globs(DEFAULT_REMOTE)

_STRING_KEYS = ("remote", "integration_ref", "trunk_ref", "required_lanes_file")
_GLOB_KEYS = ("pr_ref_globs", "feat_ref_globs")


@dataclass(frozen=True)
class AuditConfig:
    """Resolved settings for one audit run.

    Attributes:
        remote: Remote whose ``carry/*`` lanes are audited.
        integration_ref: Branch representing the merged baseline.
        trunk_ref: Unmodified upstream trunk; baseline for PR branches.
        required_lanes_file: Policy file path, relative to the repository root.
        pr_ref_globs: Ref patterns listing PR branches. Defaults to the
            ``pr/*`` branches of remote.
        feat_ref_globs: Ref patterns listing feature branches. Defaults to the
            ``feat/*`` branches of remote plus the shared remote.
    """

    remote: str = DEFAULT_REMOTE
    integration_ref: str = DEFAULT_INTEGRATION_REF
    trunk_ref: str = DEFAULT_TRUNK_REF
    required_lanes_file: str = DEFAULT_REQUIRED_LANES_FILE
    pr_ref_globs: tuple[str, ...] | None = None
    feat_ref_globs: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.pr_ref_globs is None:
            object.__setattr__(self, "pr_ref_globs", default_pr_ref_globs(self.remote))
        if self.feat_ref_globs is None:
            object.__setattr__(self, "feat_ref_globs", default_feat_ref_globs(self.remote))

    @property
    def carry_ref_glob(self) -> str:
        return f"refs/remotes/{self.remote}/carry/*"

    def with_overrides(self, **overrides: Any) -> AuditConfig:
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def _coerce_globs(key: str, value: Any, config_file: Path) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ConfigurationError(
            f"Invalid audit.{key} in {config_file}: expected a list of ref patterns"
        )
    return tuple(value)


def load_config(repo_root: Path) -> AuditConfig:
    """Load audit configuration from .carry-audit.yaml, falling back to defaults."""
    config_file = repo_root / CONFIG_FILENAME

    if not config_file.exists():
        logger.debug("Config file not found: %s (using defaults)", config_file)
        return AuditConfig()

    yaml = YAML(typ="safe")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except (OSError, YAMLError) as exc:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid {config_file}: expected a mapping at top level")

    section = data.get("audit") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid audit section in {config_file}: expected a mapping")

    unknown = sorted(set(section) - set(_STRING_KEYS) - set(_GLOB_KEYS))
    if unknown:
        logger.warning("Ignoring unknown audit key(s) in %s: %s", config_file, ", ".join(unknown))

    values: dict[str, Any] = {}
    for key in _STRING_KEYS:
        if key not in section:
            continue
        value = section[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(
                f"Invalid audit.{key} in {config_file}: expected a non-empty string"
            )
        values[key] = value.strip()
    for key in _GLOB_KEYS:
        if key in section:
            values[key] = _coerce_globs(key, section[key], config_file)

    logger.info("Loaded audit config from %s", config_file)
    return AuditConfig(**values)


__all__ = [
    "AuditConfig",
    "CONFIG_FILENAME",
    "DEFAULT_FEAT_REF_GLOBS",
    "DEFAULT_INTEGRATION_REF",
    "DEFAULT_PR_REF_GLOBS",
    "DEFAULT_REMOTE",
    "DEFAULT_REQUIRED_LANES_FILE",
    "DEFAULT_TRUNK_REF",
    "default_feat_ref_globs",
    "default_pr_ref_globs",
    "load_config",
]
