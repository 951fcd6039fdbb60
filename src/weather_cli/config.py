"""
Application configuration.

Centralized settings with support for:
- Environment variables (WEATHER_CLI_ prefix)
- .env file
- CLI argument overrides
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "weather-cli"
CONFIG_FILE_NAME = "config.json"


def default_config_path() -> Path:
    """
    Location of the provider configuration file.

    Uses $XDG_CONFIG_HOME, then ~/.config; falls back to a dotfile in the
    home directory when neither config directory can be used.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME / CONFIG_FILE_NAME

    home = Path.home()
    config_dir = home / ".config"
    if config_dir.is_dir() or not config_dir.exists():
        return config_dir / APP_DIR_NAME / CONFIG_FILE_NAME
    return home / f".{APP_DIR_NAME}.json"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Priority: CLI args > Environment > .env file > defaults

    Environment variables use WEATHER_CLI_ prefix:
    - WEATHER_CLI_CONFIG_PATH, WEATHER_CLI_TIMEOUT
    - WEATHER_CLI_REFERENCE_LOCATION, WEATHER_CLI_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_CLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Optional[Path] = Field(default=None, description="Provider configuration file")
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    reference_location: str = Field(
        default="London", description="Location used to validate a new configuration"
    )
    log_level: str = Field(default="WARNING", description="Logging level")

    def resolved_config_path(self) -> Path:
        """Explicit config path or the platform default."""
        return self.config_path or default_config_path()
