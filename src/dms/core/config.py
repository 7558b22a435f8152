"""Configuration management for DMS."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .types import RevisionPolicy


def _default_repository_dir() -> Path:
    """Get default repository directory."""
    return Path("/var/dms")


def _parse_permissions(value: Any) -> int:
    """Parse a permission mode given as an int or an octal string like '0750'."""
    if isinstance(value, int) and not isinstance(value, bool):
        mode = value
    elif isinstance(value, str):
        try:
            mode = int(value, 8)
        except ValueError as e:
            raise ConfigError(f"Invalid permissions {value!r}: not an octal mode") from e
    else:
        raise ConfigError(f"Invalid permissions {value!r}")

    if not 0 <= mode <= 0o7777:
        raise ConfigError(f"Invalid permissions {value!r}: out of range")
    return mode


def _parse_start_revision(value: Any) -> int:
    """Parse the first revision number given to new documents."""
    try:
        revision = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid start revision {value!r}") from e
    if not 1 <= revision <= 999:
        raise ConfigError(f"Invalid start revision {value!r}: must be in 1..999")
    return revision


def _parse_policy(value: Any) -> RevisionPolicy:
    """Parse a revision policy name."""
    if isinstance(value, RevisionPolicy):
        return value
    try:
        return RevisionPolicy(str(value).lower())
    except ValueError as e:
        choices = ", ".join(p.value for p in RevisionPolicy)
        raise ConfigError(f"Invalid revision policy {value!r}: expected one of {choices}") from e


@dataclass
class Config:
    """Main repository configuration."""

    repository_dir: Path = field(default_factory=_default_repository_dir)
    permissions: int = 0o700  # Applied to every created directory level
    start_revision: int = 1
    revision_policy: RevisionPolicy = RevisionPolicy.LATEST

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()
        config._apply_env()
        return config

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from a TOML file, then apply env overrides.

        Args:
            path: Path to a TOML file with top-level keys matching the
                Config fields.

        Returns:
            Config instance.

        Raises:
            ConfigError: If the file cannot be read or holds invalid values.
        """
        path = Path(path)
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"Could not read config file '{path}': {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in '{path}': {e}") from e

        config = cls()

        if (value := data.get("repository_dir")) is not None:
            config.repository_dir = Path(value)
        if (value := data.get("permissions")) is not None:
            config.permissions = _parse_permissions(value)
        if (value := data.get("start_revision")) is not None:
            config.start_revision = _parse_start_revision(value)
        if (value := data.get("revision_policy")) is not None:
            config.revision_policy = _parse_policy(value)

        config._apply_env()
        return config

    @classmethod
    def from_env_or_file(cls, path: str | Path | None = None) -> "Config":
        """Load from an explicit file, the DMS_CONFIG file, or the environment."""
        if path is None:
            path = os.environ.get("DMS_CONFIG") or None
        if path is not None:
            return cls.from_file(path)
        return cls.from_env()

    def _apply_env(self) -> None:
        """Override fields from DMS_* environment variables."""
        if path := os.environ.get("DMS_REPOSITORY_DIR"):
            self.repository_dir = Path(path)

        if mode := os.environ.get("DMS_PERMISSIONS"):
            self.permissions = _parse_permissions(mode)

        if revision := os.environ.get("DMS_START_REVISION"):
            self.start_revision = _parse_start_revision(revision)

        if policy := os.environ.get("DMS_REVISION_POLICY"):
            self.revision_policy = _parse_policy(policy)
