"""
Configuration management for the file drone.

Handles environment variables and .env files, and provides default settings
with validation for the watched directory, filters and surveillance tuning.
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from file_drone.models.exceptions import FilterConfigurationError


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def default_directory() -> Path:
    """
    Resolve the default directory to watch.

    Uses ``XDG_DOCUMENTS_DIR`` when set, otherwise the user's Documents folder.
    """
    documents = os.environ.get('XDG_DOCUMENTS_DIR')
    if documents:
        return Path(documents).expanduser()
    return Path.home() / "Documents"


class DroneConfig(BaseSettings):
    """
    Central configuration class for the file drone.

    Handles all configuration options with environment variable support,
    validation, and sensible defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="FILE_DRONE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        use_enum_values=True,
    )

    # === Directory Configuration ===
    directory_path: Path | None = Field(
        default=None, validate_default=True, description="Directory to watch (defaults to ~/Documents)"
    )
    recursive: bool = Field(default=False, description="Re-enumerate subdirectories on every refresh")

    # === Filter Configuration ===
    file_name_pattern: str | None = Field(default=None, description="Regular expression matched against file names")
    type_pattern: str | None = Field(default=None, description="Regular expression matched against file type tags")

    # === Surveillance Configuration ===
    debounce_seconds: float = Field(
        default=0.0, ge=0.0, le=30.0, description="Delay before a signalled refresh starts enumerating"
    )
    use_polling: bool = Field(default=False, description="Use a polling observer instead of native OS events")
    poll_interval_seconds: float = Field(default=1.0, ge=0.1, le=60.0, description="Polling observer interval")
    observer_join_timeout: float = Field(
        default=5.0, ge=0.0, le=60.0, description="Seconds to wait for the observer thread on stop"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @field_validator('directory_path', mode='before')
    @classmethod
    def validate_directory_path(cls, v):
        """Fall back to the default directory when none is configured."""
        if v is None or v == "":
            return default_directory()
        return Path(v).expanduser()

    @field_validator('file_name_pattern', 'type_pattern')
    @classmethod
    def validate_pattern(cls, v, info):
        """Reject patterns that are not valid regular expressions."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise FilterConfigurationError(
                f"Invalid {info.field_name}: {e}",
                filter_name=info.field_name,
                pattern=v,
                underlying_error=e,
            ) from e
        return v

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        level = self.log_level.value if isinstance(self.log_level, LogLevel) else self.log_level
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": level,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"file_drone": {"handlers": ["default"], "level": level, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Process-wide configuration shared by controllers built without an explicit one
_config: DroneConfig | None = None


def get_config() -> DroneConfig:
    """Return the shared drone configuration, loading it from the environment on first use."""
    global _config
    if _config is None:
        _config = DroneConfig()
    return _config


def reload_config() -> DroneConfig:
    """
    Re-read ``FILE_DRONE_*`` variables and ``.env`` into a fresh shared configuration.

    Controllers already constructed keep the configuration they were given.
    """
    global _config
    _config = DroneConfig()
    return _config


def set_config(config: DroneConfig) -> None:
    """Replace the shared configuration, e.g. to point default controllers at another directory."""
    global _config
    _config = config
