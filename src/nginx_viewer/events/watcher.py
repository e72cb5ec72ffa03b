"""Single-file change detector with debouncing.

The containing directory is watched rather than the file itself, so
editors and config-management tools that replace the file through a
rename are still noticed. Watchdog delivers events on its own thread;
they are handed to the asyncio loop, where relevance filtering and the
debounce timer run.
"""

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from nginx_viewer.events.normalizer import normalize_event
from nginx_viewer.events.types import RELOAD_SIGNAL, ChangeKind, FsEvent

logger = structlog.get_logger()

TRACKED_KINDS: frozenset[ChangeKind] = frozenset(
    {
        ChangeKind.WRITE,
        ChangeKind.CREATE,
        ChangeKind.RENAME,
        ChangeKind.REMOVE,
    }
)


class Cancellable(Protocol):
    """Handle for a scheduled call."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback after a delay on a monotonic clock.

    ``asyncio.AbstractEventLoop`` satisfies this protocol.
    """

    def call_later(
        self,
        delay: float,
        callback: Callable[..., object],
        *args: Any,
    ) -> Cancellable: ...


def base_name(path: str) -> str:
    """Return the final path component, ignoring a trailing separator."""
    return os.path.basename(path.rstrip(os.sep))


def is_event_for(event: FsEvent, target: str) -> bool:
    """Check whether a filesystem event affects the tracked file.

    Matches events on the exact path, and also any event whose base name
    equals the target's, which catches a temp file being renamed over
    the target.

    Args:
        event: Normalized filesystem event.
        target: Absolute path of the tracked file.

    Returns:
        True if the event should trigger a change signal.
    """
    if event.path == target and event.kind in TRACKED_KINDS:
        return True
    return base_name(event.path) == base_name(target)


class Debouncer:
    """Collapses bursts of triggers into one callback after a quiet window.

    Each trigger cancels the pending call, if any, and schedules a new
    one, so the callback runs once, ``delay`` seconds after the last
    trigger of a burst.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        delay: float,
        callback: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._pending: Cancellable | None = None

    @property
    def delay(self) -> float:
        """Quiet window in seconds."""
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled."""
        return self._pending is not None

    def trigger(self) -> bool:
        """Schedule the callback, replacing any pending call.

        Returns:
            True if a pending call was replaced.
        """
        replaced = self.cancel()
        self._pending = self._scheduler.call_later(self._delay, self._fire)
        return replaced

    def cancel(self) -> bool:
        """Cancel the pending call.

        Returns:
            True if a call was pending.
        """
        if self._pending is None:
            return False
        self._pending.cancel()
        self._pending = None
        return True

    def _fire(self) -> None:
        self._pending = None
        self._callback()


class _TrackedFileHandler(FileSystemEventHandler):
    """Forwards watchdog events from the observer thread to the loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_event: Callable[[FsEvent], None],
    ) -> None:
        super().__init__()
        self._loop = loop
        self._on_event = on_event

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            for fs_event in normalize_event(event):
                self._loop.call_soon_threadsafe(self._on_event, fs_event)
        except Exception as e:
            logger.error(
                "watcher_error",
                error=str(e),
                event_type=event.event_type,
            )


class ChangeDetector:
    """Watches one file and emits a change signal after quiet periods.

    Attributes:
        tracked_path: Absolute path of the tracked file.
        debounce_ms: Quiet window in milliseconds.
    """

    def __init__(
        self,
        path: str | Path,
        loop: asyncio.AbstractEventLoop,
        on_change: Callable[[str], object],
        debounce_ms: int = 200,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize change detector.

        Args:
            path: File to track; made absolute here and fixed afterwards.
            loop: Event loop that runs filtering and the debounce timer.
            on_change: Called with the change signal when a burst ends.
            debounce_ms: Quiet window in milliseconds.
            scheduler: Timer source, defaults to ``loop``.
        """
        self._path = Path(os.path.abspath(path))
        self._target = str(self._path)
        self._loop = loop
        self._on_change = on_change
        self._debounce_ms = debounce_ms
        self._debouncer = Debouncer(
            scheduler if scheduler is not None else loop,
            debounce_ms / 1000.0,
            self._emit,
        )
        self._handler = _TrackedFileHandler(loop, self.observe)
        self._observer: Observer | None = None  # pyright: ignore[reportInvalidTypeForm]
        self._relevant_count = 0
        self._coalesced_count = 0
        self._emitted_count = 0

    @property
    def tracked_path(self) -> Path:
        """Absolute path of the tracked file."""
        return self._path

    @property
    def watch_dir(self) -> Path:
        """Directory being watched."""
        return self._path.parent

    @property
    def debounce_ms(self) -> int:
        """Quiet window in milliseconds."""
        return self._debounce_ms

    @property
    def is_running(self) -> bool:
        """Whether the observer thread is alive."""
        return self._observer is not None and self._observer.is_alive()

    @property
    def relevant_events(self) -> int:
        """Number of events that matched the tracked file."""
        return self._relevant_count

    @property
    def coalesced_events(self) -> int:
        """Number of events folded into an already pending signal."""
        return self._coalesced_count

    @property
    def signals_emitted(self) -> int:
        """Number of change signals emitted."""
        return self._emitted_count

    def observe(self, event: FsEvent) -> None:
        """Handle one filesystem event on the loop thread.

        Args:
            event: Normalized filesystem event from the watched directory.
        """
        if not is_event_for(event, self._target):
            return

        self._relevant_count += 1
        if self._debouncer.trigger():
            self._coalesced_count += 1
        logger.debug("watcher_event", path=event.path, kind=event.kind.value)

    def _emit(self) -> None:
        self._emitted_count += 1
        logger.info("change_signal_emitted", path=self._target)
        try:
            self._on_change(RELOAD_SIGNAL)
        except Exception as e:
            logger.error("watcher_callback_error", error=str(e), path=self._target)

    def start(self) -> None:
        """Start watching the tracked file's directory.

        A direct watch on the file is added as well when the file exists;
        failing to add it is not an error since the directory watch also
        reports the file's creation.

        Raises:
            ValueError: If the containing directory does not exist.
            OSError: If the directory watch cannot be started.
        """
        watch_dir = self.watch_dir
        if not watch_dir.is_dir():
            raise ValueError(f"Watch directory does not exist: {watch_dir}")

        observer = Observer()
        observer.schedule(self._handler, str(watch_dir), recursive=False)
        observer.start()
        self._observer = observer
        logger.info("watcher_scheduled", path=str(watch_dir))

        try:
            observer.schedule(self._handler, self._target, recursive=False)
        except OSError as e:
            logger.info("watcher_file_watch_skipped", path=self._target, error=str(e))

        logger.info(
            "watcher_started",
            path=self._target,
            debounce_ms=self._debounce_ms,
        )

    def stop(self) -> None:
        """Cancel any pending signal and stop the observer."""
        self._debouncer.cancel()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        logger.info("watcher_stopped")
