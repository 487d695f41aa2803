"""Unified configuration via pydantic-settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shepherd.exceptions import ConfigError

DEFAULT_OLD_BRANCH_AGE = 60

_CONFIG_SEARCH_NAMES = (".shepherd.yaml", "shepherd.yaml")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ShepherdSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHEPHERD_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Project list
    config_file: Path | None = None

    # Branch reports
    old_branch_age: int = DEFAULT_OLD_BRANCH_AGE

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("config_file", "log_dir")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


def find_config_file(
    option: Path | None, settings: ShepherdSettings, home: Path | None = None
) -> Path:
    """Locate the project list: explicit option, then settings, then home dir."""
    home = home if home is not None else Path.home()
    candidates = [p for p in (option, settings.config_file) if p is not None]
    candidates.extend(home / name for name in _CONFIG_SEARCH_NAMES)

    for candidate in candidates:
        path = candidate.expanduser()
        if path.is_file():
            return path

    tried = ", ".join(str(c) for c in candidates)
    raise ConfigError(f"Unable to find a project list (tried: {tried})")
