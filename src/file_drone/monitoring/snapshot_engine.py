"""
Snapshot enumeration and diffing.

Builds a snapshot of every file in a directory that passes a FilterChain and
compares it with the previously committed snapshot to produce the sets of
added, modified and removed paths.
"""

import logging
import mimetypes
import os
import stat
from collections.abc import Iterator
from pathlib import Path

from file_drone.models import DEFAULT_TYPE_TAG, DiffResult, FileRecord, Snapshot
from file_drone.models.exceptions import EnumerationError
from file_drone.monitoring.filters import FilterChain

logger = logging.getLogger(__name__)


def guess_type_tag(path: Path) -> str:
    """Classify a file by MIME type, falling back to a generic binary type."""
    type_tag, _ = mimetypes.guess_type(path.name, strict=False)
    return type_tag or DEFAULT_TYPE_TAG


class SnapshotDiffEngine:
    """
    Enumerates a directory and diffs the result against a baseline.

    The engine holds no state between calls: the caller owns the baseline
    snapshot and decides whether the candidate snapshot returned by
    ``compute_diff`` gets committed.
    """

    def compute_diff(
        self,
        directory_path: Path,
        filter_chain: FilterChain | None,
        previous_snapshot: Snapshot,
        recursive: bool = False,
    ) -> tuple[Snapshot, DiffResult]:
        """
        Enumerate matching files and diff them against a previous snapshot.

        Args:
            directory_path: Directory to enumerate
            filter_chain: Filters a file must pass to be tracked (None tracks everything)
            previous_snapshot: Baseline to compare against
            recursive: Whether to descend into subdirectories

        Returns:
            Tuple of the candidate snapshot and the diff result

        Raises:
            EnumerationError: If the directory cannot be listed
        """
        new_snapshot = self.build_snapshot(directory_path, filter_chain, recursive)
        diff = self.diff_snapshots(previous_snapshot, new_snapshot)

        logger.debug(
            "Diffed %s: %d tracked, %d added, %d modified, %d removed",
            directory_path,
            len(new_snapshot),
            len(diff.added),
            len(diff.modified),
            len(diff.removed),
        )
        return new_snapshot, diff

    def build_snapshot(
        self,
        directory_path: Path,
        filter_chain: FilterChain | None = None,
        recursive: bool = False,
    ) -> Snapshot:
        """
        Build a snapshot of every file under a directory that passes the filters.

        Raises:
            EnumerationError: If the top-level directory cannot be listed
        """
        directory_path = Path(directory_path).absolute()
        snapshot: Snapshot = {}

        for record in self._iter_records(directory_path, recursive):
            if filter_chain is None or filter_chain.matches(record):
                snapshot[record.path] = record

        return snapshot

    @staticmethod
    def diff_snapshots(previous: Snapshot, current: Snapshot) -> DiffResult:
        """
        Compare two snapshots by path.

        A path counts as modified only when present in both snapshots and its
        modification time moved forward; identical timestamps are unchanged.
        """
        previous_paths = previous.keys()
        current_paths = current.keys()

        added = current_paths - previous_paths
        removed = previous_paths - current_paths
        modified = {
            path for path in current_paths & previous_paths if current[path].mtime_ns > previous[path].mtime_ns
        }

        return DiffResult(
            added=tuple(sorted(added)),
            modified=tuple(sorted(modified)),
            removed=tuple(sorted(removed)),
            file_paths=tuple(sorted(current_paths)),
        )

    def _iter_records(self, directory_path: Path, recursive: bool) -> Iterator[FileRecord]:
        try:
            with os.scandir(directory_path) as iterator:
                entries = list(iterator)
        except OSError as e:
            raise EnumerationError(
                f"Cannot list directory {directory_path}: {e}",
                path=str(directory_path),
                underlying_error=e,
            ) from e

        subdirectories = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirectories.append(Path(entry.path))
                    continue
                entry_stat = entry.stat()
            except FileNotFoundError:
                # Vanished between listing and stat
                continue
            except OSError as e:
                logger.warning("Skipping unreadable entry %s: %s", entry.path, e)
                continue

            if not stat.S_ISREG(entry_stat.st_mode):
                continue

            path = Path(entry.path)
            yield FileRecord(path=path, mtime_ns=entry_stat.st_mtime_ns, type_tag=guess_type_tag(path))

        if not recursive:
            return

        for subdirectory in subdirectories:
            try:
                yield from self._iter_records(subdirectory, recursive)
            except EnumerationError as e:
                logger.warning("Skipping unreadable subdirectory %s: %s", subdirectory, e.cause)
