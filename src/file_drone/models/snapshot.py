"""
Data models for directory snapshots and change deltas.

A snapshot maps every tracked file path to an immutable FileRecord. Two
snapshots are compared to produce a DiffResult, which is what consumers of
the file drone receive after each refresh.
"""

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

DEFAULT_TYPE_TAG = "application/octet-stream"


class SurveillanceState(str, Enum):
    """Lifecycle state of a surveillance controller."""

    IDLE = "idle"
    WATCHING = "watching"
    PAUSED = "paused"


class FileRecord(BaseModel):
    """
    Metadata captured for a single tracked file.

    Records are frozen; a file that changes on disk produces a new record
    during the next enumeration rather than mutating the old one.
    """

    path: Path = Field(..., description="Absolute path to the file")
    mtime_ns: int = Field(..., description="Modification time in nanoseconds since the epoch, negative before 1970")
    type_tag: str = Field(default=DEFAULT_TYPE_TAG, description="Type classification of the file (MIME type)")

    @property
    def modified_at(self) -> datetime:
        """Modification time as an aware datetime."""
        return datetime.fromtimestamp(self.mtime_ns / 1_000_000_000, tz=UTC)

    @property
    def name(self) -> str:
        """Base name of the file."""
        return self.path.name

    def __str__(self) -> str:
        return f"FileRecord({self.path}, {self.type_tag})"

    model_config = ConfigDict(frozen=True)


Snapshot = dict[Path, FileRecord]


class DiffResult(BaseModel):
    """
    Delta between two snapshots.

    ``modified`` only holds paths present in both snapshots whose modification
    time moved forward. ``changed`` is what gets reported to consumers as the
    changed list: every added or modified path.
    """

    added: tuple[Path, ...] = Field(default=(), description="Paths present only in the new snapshot")
    modified: tuple[Path, ...] = Field(default=(), description="Paths in both snapshots with a newer timestamp")
    removed: tuple[Path, ...] = Field(default=(), description="Paths present only in the previous snapshot")
    file_paths: tuple[Path, ...] = Field(default=(), description="Every path in the new snapshot")

    @model_validator(mode='after')
    def validate_disjoint(self):
        """Ensure a path is never both added and removed or modified."""
        added = set(self.added)
        if added & set(self.removed):
            raise ValueError("added and removed paths must be disjoint")
        if added & set(self.modified):
            raise ValueError("added and modified paths must be disjoint")
        return self

    @computed_field
    @property
    def changed(self) -> tuple[Path, ...]:
        """Added and modified paths, sorted."""
        return tuple(sorted((*self.added, *self.modified)))

    @property
    def has_changes(self) -> bool:
        """Whether anything was added, modified or removed."""
        return bool(self.added or self.modified or self.removed)

    def __str__(self) -> str:
        return f"DiffResult(added={len(self.added)}, modified={len(self.modified)}, removed={len(self.removed)})"

    model_config = ConfigDict(frozen=True)


class FilesChangedNotification(BaseModel):
    """
    Broadcast payload announcing a finished refresh.

    A refresh that could not list the directory is announced too, with empty
    lists and ``error`` set to the failure message.
    """

    directory: Path = Field(..., description="Directory the refresh was performed on")
    added: tuple[Path, ...] = Field(default=())
    changed: tuple[Path, ...] = Field(default=())
    removed: tuple[Path, ...] = Field(default=())
    error: str | None = Field(default=None, description="Why the refresh failed, if it did")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Notification creation timestamp",
    )

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def from_diff(cls, directory: Path, diff: DiffResult) -> "FilesChangedNotification":
        """Build a notification from a diff result."""
        return cls(directory=directory, added=diff.added, changed=diff.changed, removed=diff.removed)

    @classmethod
    def from_error(cls, directory: Path, error: Exception) -> "FilesChangedNotification":
        """Build a notification for a refresh that failed."""
        return cls(directory=directory, error=str(error))

    model_config = ConfigDict(frozen=True)
