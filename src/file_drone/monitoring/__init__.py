"""
Monitoring package for directory change detection.

This package provides the low-level directory event source, the snapshot
diff engine with its filters, and the surveillance controller that ties
them together.
"""

from .controller import (
    RefreshCompletion,
    RefreshErrorHandler,
    SurveillanceController,
    controller_for_directory,
    default_controller,
)
from .event_source import DirectoryEventSource
from .filters import FilterChain
from .snapshot_engine import SnapshotDiffEngine, guess_type_tag

__all__ = [
    "DirectoryEventSource",
    "FilterChain",
    "RefreshCompletion",
    "RefreshErrorHandler",
    "SnapshotDiffEngine",
    "SurveillanceController",
    "controller_for_directory",
    "default_controller",
    "guess_type_tag",
]
