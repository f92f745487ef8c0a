"""
Surveillance controller tying change signals to snapshot diffs.

Owns a DirectoryEventSource and a SnapshotDiffEngine, runs refreshes off the
event loop, commits their snapshots, and delivers the resulting deltas to a
completion callback and to a publish/subscribe collaborator.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from file_drone.config import DroneConfig, get_config
from file_drone.core.interfaces import IChangePublisher, ILifecycleListener, ILifecycleSource
from file_drone.core.notifications import ApplicationLifecycle, NotificationCenter
from file_drone.models import DiffResult, FilesChangedNotification, Snapshot, SurveillanceState
from file_drone.models.exceptions import EnumerationError, MonitoringError, WatchSetupError
from file_drone.monitoring.event_source import DirectoryEventSource
from file_drone.monitoring.filters import FilterChain
from file_drone.monitoring.snapshot_engine import SnapshotDiffEngine

logger = logging.getLogger(__name__)

RefreshCompletion = Callable[[list[Path], list[Path], list[Path]], Awaitable[Any] | Any]
RefreshErrorHandler = Callable[[MonitoringError], Awaitable[Any] | Any]

_MAX_RECORDED_ERRORS = 100


class SurveillanceController(ILifecycleListener):
    """
    Tracks the files of one directory and reports what changed.

    States are IDLE, WATCHING and PAUSED. While WATCHING, every change signal
    from the event source schedules a refresh; signals arriving while one is
    scheduled or running coalesce into a single follow-up refresh. All state
    transitions and commits happen on the event loop the controller was
    started from; enumeration runs in a worker thread.
    """

    def __init__(
        self,
        directory_path: Path | str | None = None,
        filter_chain: FilterChain | None = None,
        recursive: bool | None = None,
        completion: RefreshCompletion | None = None,
        on_error: RefreshErrorHandler | None = None,
        publisher: IChangePublisher | None = None,
        lifecycle: ILifecycleSource | None = None,
        config: DroneConfig | None = None,
        event_source: DirectoryEventSource | None = None,
        engine: SnapshotDiffEngine | None = None,
    ):
        """
        Initialize the controller.

        Args:
            directory_path: Directory to watch (defaults to the configured directory)
            filter_chain: Filters for tracked files (defaults to the configured patterns)
            recursive: Whether refreshes descend into subdirectories (defaults to config)
            completion: Callback receiving (added, changed, removed) after each scheduled refresh
            on_error: Callback receiving the error when a scheduled refresh fails
            publisher: Publish/subscribe collaborator announcing completed refreshes
            lifecycle: Source of background/foreground signals driving pause/resume
            config: Drone configuration
            event_source: Optional event source (will create if not provided)
            engine: Optional snapshot engine (will create if not provided)
        """
        self.config = config or get_config()
        self._directory = Path(directory_path or self.config.directory_path).absolute()
        self._filter_chain = filter_chain or FilterChain(self.config.file_name_pattern, self.config.type_pattern)
        self.recursive = self.config.recursive if recursive is None else recursive
        self.completion = completion
        self.on_error = on_error
        self.publisher = publisher or NotificationCenter()
        self.lifecycle = lifecycle or ApplicationLifecycle()
        self.engine = engine or SnapshotDiffEngine()

        self.event_source = event_source or DirectoryEventSource(
            self._directory,
            use_polling=self.config.use_polling,
            poll_interval=self.config.poll_interval_seconds,
            join_timeout=self.config.observer_join_timeout,
        )
        self.event_source.observe_changes(self._on_directory_signal)

        # Surveillance state
        self._state = SurveillanceState.IDLE
        self._loop: asyncio.AbstractEventLoop | None = None
        self._generation = 0
        self._updates_guard = 0

        # Baseline and last reported delta
        self._snapshot: Snapshot = {}
        self._added: tuple[Path, ...] = ()
        self._changed: tuple[Path, ...] = ()
        self._removed: tuple[Path, ...] = ()
        self._file_paths: tuple[Path, ...] = ()

        # Refresh scheduling
        self._refresh_lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._scheduled_task: asyncio.Task | None = None
        self._refresh_pending = False

        self._stats = {
            "refreshes": 0,
            "commits": 0,
            "discarded": 0,
            "signals": {"received": 0, "ignored": 0, "coalesced": 0},
            "errors": [],
        }

    # === Lifecycle ===

    def start(self) -> None:
        """
        Start watching the directory and schedule the initial refresh.

        Must be called from a running event loop. Does nothing if already
        watching or paused.

        Raises:
            WatchSetupError: If the directory watch cannot be acquired
        """
        if self._state is not SurveillanceState.IDLE:
            logger.debug("Surveillance of %s already started", self._directory)
            return

        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise WatchSetupError(
                "Surveillance must be started from a running event loop",
                path=str(self._directory),
                underlying_error=e,
            ) from e

        if not self.event_source.start():
            self._record_error("start", f"cannot watch {self._directory}")
            raise WatchSetupError(f"Failed to watch directory: {self._directory}", path=str(self._directory))

        self._state = SurveillanceState.WATCHING
        self.lifecycle.subscribe(self)
        logger.info("Surveillance started for %s (recursive: %s)", self._directory, self.recursive)

        self._request_refresh(debounce=False)

    def stop(self) -> None:
        """
        Stop watching and discard the baseline.

        A refresh still running when this is called completes without
        committing or delivering its result.
        """
        if self._state is SurveillanceState.IDLE:
            logger.debug("Surveillance of %s not active, nothing to stop", self._directory)
            return

        logger.info("Stopping surveillance of %s", self._directory)
        self._state = SurveillanceState.IDLE
        self._generation += 1
        self._refresh_pending = False

        self.lifecycle.unsubscribe(self)
        self.event_source.stop()
        self._reset_baseline()

        logger.info("Surveillance of %s stopped", self._directory)

    def pause(self) -> None:
        """Ignore change signals until resumed."""
        if self._state is not SurveillanceState.WATCHING:
            return
        self._state = SurveillanceState.PAUSED
        logger.info("Surveillance of %s paused", self._directory)

    def resume(self) -> None:
        """Resume handling change signals and refresh to catch up on missed changes."""
        if self._state is not SurveillanceState.PAUSED:
            return
        self._state = SurveillanceState.WATCHING
        logger.info("Surveillance of %s resumed", self._directory)
        self._request_refresh(debounce=False)

    # === Updates guard ===

    def disable_updates(self) -> None:
        """Stop committing new snapshots until a matching enable_updates() call."""
        self._updates_guard += 1
        logger.debug("Updates disabled for %s (guard: %d)", self._directory, self._updates_guard)

    def enable_updates(self) -> None:
        """Undo one disable_updates() call. Unmatched calls are ignored."""
        if self._updates_guard == 0:
            logger.debug("enable_updates() without matching disable_updates() for %s", self._directory)
            return
        self._updates_guard -= 1
        logger.debug("Updates enabled for %s (guard: %d)", self._directory, self._updates_guard)

    # === Refreshing ===

    async def refresh(self, completion: RefreshCompletion | None = None) -> DiffResult | None:
        """
        Check the directory for changes now.

        Usable in any state, including before the first start(). Waits for a
        refresh already in progress, then diffs, commits unless updates are
        disabled, and delivers the result.

        Args:
            completion: Callback receiving (added, changed, removed) lists

        Returns:
            The diff result, or None if stop() was called while it ran

        Raises:
            EnumerationError: If the directory cannot be listed. Subscribers
                also receive a failed FilesChangedNotification.
        """
        async with self._get_refresh_lock():
            return await self._refresh_locked(completion)

    async def wait_for_refreshes(self) -> None:
        """Wait until scheduled refreshes, including coalesced follow-ups, have finished."""
        while self._scheduled_task is not None and not self._scheduled_task.done():
            await asyncio.shield(self._scheduled_task)

    def _on_directory_signal(self) -> None:
        # Runs on the observer thread
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Dropping change signal for %s: no event loop", self._directory)
            return
        try:
            loop.call_soon_threadsafe(self._handle_signal)
        except RuntimeError as e:
            logger.debug("Dropping change signal for %s: %s", self._directory, e)

    def _handle_signal(self) -> None:
        self._stats["signals"]["received"] += 1
        if self._state is not SurveillanceState.WATCHING:
            self._stats["signals"]["ignored"] += 1
            logger.debug("Ignoring change signal for %s while %s", self._directory, self._state.value)
            return
        self._request_refresh(debounce=True)

    def _request_refresh(self, debounce: bool) -> None:
        if self._scheduled_task is not None and not self._scheduled_task.done():
            if self._refresh_pending:
                self._stats["signals"]["coalesced"] += 1
            self._refresh_pending = True
            logger.debug("Refresh of %s already scheduled, coalescing", self._directory)
            return

        self._refresh_pending = True
        self._scheduled_task = self._loop.create_task(self._run_scheduled_refreshes(debounce))

    async def _run_scheduled_refreshes(self, debounce: bool) -> None:
        while self._refresh_pending and self._state is SurveillanceState.WATCHING:
            if debounce and self.config.debounce_seconds > 0:
                await asyncio.sleep(self.config.debounce_seconds)
            debounce = True

            async with self._get_refresh_lock():
                if self._state is not SurveillanceState.WATCHING:
                    break
                # Signals from here on need another pass
                self._refresh_pending = False
                try:
                    await self._refresh_locked(self.completion, self.on_error)
                except MonitoringError:
                    # Already delivered; surveillance continues
                    continue
                except Exception as e:
                    logger.exception("Unexpected error refreshing %s: %s", self._directory, e)
                    self._record_error("refresh", str(e))

    async def _refresh_locked(
        self, completion: RefreshCompletion | None, on_error: RefreshErrorHandler | None = None
    ) -> DiffResult | None:
        generation = self._generation
        directory = self._directory
        logger.debug("Refreshing %s", directory)

        try:
            new_snapshot, diff = await asyncio.to_thread(
                self.engine.compute_diff, directory, self._filter_chain.copy(), self._snapshot, self.recursive
            )
        except EnumerationError as e:
            self._record_error("refresh", str(e))
            logger.error("Refresh of %s failed: %s", directory, e)
            if generation == self._generation:
                await self._deliver_failure(directory, e, on_error)
            raise

        self._stats["refreshes"] += 1
        if generation != self._generation:
            self._stats["discarded"] += 1
            logger.info("Discarding refresh of %s that completed after stop", directory)
            return None

        if self._updates_guard == 0:
            self._snapshot = new_snapshot
            self._added, self._changed, self._removed = diff.added, diff.changed, diff.removed
            self._file_paths = diff.file_paths
            self._stats["commits"] += 1
        else:
            logger.debug("Updates disabled, keeping baseline for %s", directory)

        if diff.has_changes:
            logger.info(
                "Changes in %s: %d added, %d changed, %d removed",
                directory,
                len(diff.added),
                len(diff.changed),
                len(diff.removed),
            )

        await self._deliver(directory, diff, completion)
        return diff

    async def _deliver(self, directory: Path, diff: DiffResult, completion: RefreshCompletion | None) -> None:
        if completion is not None:
            try:
                result = completion(list(diff.added), list(diff.changed), list(diff.removed))
                if asyncio.iscoroutine(result) or hasattr(result, '__await__'):
                    await result
            except Exception as e:
                logger.error("Error in refresh completion for %s: %s", directory, e)
                self._record_error("completion", str(e))

        try:
            await self.publisher.publish(FilesChangedNotification.from_diff(directory, diff))
        except Exception as e:
            logger.error("Error publishing changes for %s: %s", directory, e)
            self._record_error("publish", str(e))

    async def _deliver_failure(
        self, directory: Path, error: MonitoringError, on_error: RefreshErrorHandler | None
    ) -> None:
        if on_error is not None:
            try:
                result = on_error(error)
                if asyncio.iscoroutine(result) or hasattr(result, '__await__'):
                    await result
            except Exception as e:
                logger.error("Error in refresh error handler for %s: %s", directory, e)
                self._record_error("on_error", str(e))

        try:
            await self.publisher.publish(FilesChangedNotification.from_error(directory, error))
        except Exception as e:
            logger.error("Error publishing failure for %s: %s", directory, e)
            self._record_error("publish", str(e))

    def _get_refresh_lock(self) -> asyncio.Lock:
        # A lock is tied to the loop that first waits on it; restarts may run under a new loop
        loop = asyncio.get_running_loop()
        if self._refresh_lock is None or self._lock_loop is not loop:
            self._refresh_lock = asyncio.Lock()
            self._lock_loop = loop
        return self._refresh_lock

    def _reset_baseline(self) -> None:
        self._snapshot = {}
        self._added = self._changed = self._removed = self._file_paths = ()

    def _record_error(self, operation: str, message: str) -> None:
        self._stats["errors"].append(f"{self._directory} ({operation}): {message}")

        # Keep only the most recent errors
        if len(self._stats["errors"]) > _MAX_RECORDED_ERRORS:
            self._stats["errors"] = self._stats["errors"][-_MAX_RECORDED_ERRORS:]

    # === Properties ===

    @property
    def directory(self) -> Path:
        """The directory under surveillance."""
        return self._directory

    @directory.setter
    def directory(self, directory_path: Path | str) -> None:
        if self._state is not SurveillanceState.IDLE:
            raise MonitoringError(
                "Cannot change directory while surveillance is active",
                path=str(directory_path),
                operation="set_directory",
            )
        self._directory = Path(directory_path).absolute()
        self.event_source.directory_path = self._directory
        self._generation += 1
        self._reset_baseline()

    @property
    def filter_chain(self) -> FilterChain:
        return self._filter_chain

    @filter_chain.setter
    def filter_chain(self, filter_chain: FilterChain | None) -> None:
        # The committed baseline was filtered by the current chain
        if self._state is not SurveillanceState.IDLE:
            raise MonitoringError(
                "Cannot change filters while surveillance is active",
                path=str(self._directory),
                operation="set_filter_chain",
            )
        self._filter_chain = filter_chain or FilterChain()
        self._generation += 1
        self._reset_baseline()

    @property
    def state(self) -> SurveillanceState:
        return self._state

    @property
    def is_surveilling(self) -> bool:
        """Check if the directory is under automatic surveillance (watching or paused)."""
        return self._state is not SurveillanceState.IDLE

    @property
    def updates_disabled(self) -> bool:
        return self._updates_guard > 0

    @property
    def snapshot(self) -> Snapshot:
        """Copy of the committed baseline snapshot."""
        return dict(self._snapshot)

    @property
    def file_paths(self) -> list[Path]:
        """Every tracked file as of the last committed refresh."""
        return list(self._file_paths)

    @property
    def added_file_paths(self) -> list[Path]:
        """Files added during the last committed refresh."""
        return list(self._added)

    @property
    def changed_file_paths(self) -> list[Path]:
        """Files added or modified during the last committed refresh."""
        return list(self._changed)

    @property
    def removed_file_paths(self) -> list[Path]:
        """Files removed during the last committed refresh."""
        return list(self._removed)

    def get_surveillance_stats(self) -> dict[str, Any]:
        """
        Get surveillance statistics.

        Returns:
            Dictionary with surveillance statistics
        """
        return {
            "state": self._state.value,
            "directory": str(self._directory),
            "tracked_files": len(self._snapshot),
            "updates_guard": self._updates_guard,
            "event_source_status": {
                "is_running": self.event_source.is_running,
                "watched_path": self.event_source.watched_path,
            },
            "refresh_stats": {
                "refreshes": self._stats["refreshes"],
                "commits": self._stats["commits"],
                "discarded": self._stats["discarded"],
                "signals": dict(self._stats["signals"]),
                "errors": list(self._stats["errors"]),
            },
            "configuration": {
                "recursive": self.recursive,
                "filters": repr(self._filter_chain),
                "debounce_seconds": self.config.debounce_seconds,
                "use_polling": self.config.use_polling,
            },
        }


def controller_for_directory(directory_path: Path | str, **kwargs) -> SurveillanceController:
    """Create a controller watching the given directory."""
    return SurveillanceController(directory_path=directory_path, **kwargs)


def default_controller(config: DroneConfig | None = None, **kwargs) -> SurveillanceController:
    """
    Create a controller for the configured default directory.

    The directory comes from ``config.directory_path``, which defaults to the
    user's Documents folder.
    """
    config = config or get_config()
    return SurveillanceController(directory_path=config.directory_path, config=config, **kwargs)
