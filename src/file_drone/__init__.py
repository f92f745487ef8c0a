"""
File drone: track the files of a directory and report what changed.

Combines a watchdog-backed directory event source with a snapshot diff
engine, under a surveillance controller that can be started, stopped,
paused and resumed.
"""

from file_drone.config import DroneConfig, get_config
from file_drone.core import ApplicationLifecycle, IChangePublisher, ILifecycleSource, NotificationCenter
from file_drone.models import (
    DiffResult,
    EnumerationError,
    FileRecord,
    FilesChangedNotification,
    FilterConfigurationError,
    SurveillanceState,
    WatchSetupError,
)
from file_drone.monitoring import (
    DirectoryEventSource,
    FilterChain,
    SnapshotDiffEngine,
    SurveillanceController,
    controller_for_directory,
    default_controller,
)

__version__ = "0.1.0"

__all__ = [
    "ApplicationLifecycle",
    "DiffResult",
    "DirectoryEventSource",
    "DroneConfig",
    "EnumerationError",
    "FileRecord",
    "FilesChangedNotification",
    "FilterChain",
    "FilterConfigurationError",
    "IChangePublisher",
    "ILifecycleSource",
    "NotificationCenter",
    "SnapshotDiffEngine",
    "SurveillanceController",
    "SurveillanceState",
    "WatchSetupError",
    "controller_for_directory",
    "default_controller",
    "get_config",
]
