"""Data models and exceptions for the file drone."""

from file_drone.models.exceptions import (
    BaseError,
    ConfigurationError,
    EnumerationError,
    FilterConfigurationError,
    MonitoringError,
    WatchSetupError,
)
from file_drone.models.snapshot import (
    DEFAULT_TYPE_TAG,
    DiffResult,
    FileRecord,
    FilesChangedNotification,
    Snapshot,
    SurveillanceState,
)

__all__ = [
    "DEFAULT_TYPE_TAG",
    "DiffResult",
    "FileRecord",
    "FilesChangedNotification",
    "Snapshot",
    "SurveillanceState",
    "BaseError",
    "ConfigurationError",
    "FilterConfigurationError",
    "MonitoringError",
    "WatchSetupError",
    "EnumerationError",
]
