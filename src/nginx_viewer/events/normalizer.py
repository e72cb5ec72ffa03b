"""Translation of raw watchdog events into filesystem events."""

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
)

from nginx_viewer.events.types import ChangeKind, FsEvent

KIND_MAP: dict[type[FileSystemEvent], ChangeKind] = {
    FileModifiedEvent: ChangeKind.WRITE,
    FileCreatedEvent: ChangeKind.CREATE,
    FileDeletedEvent: ChangeKind.REMOVE,
}


def decode_path(path: str | bytes) -> str:
    """Return a watchdog path as text.

    Args:
        path: Path as reported by watchdog.

    Returns:
        The path as a string.
    """
    if isinstance(path, str):
        return path
    return bytes(path).decode("utf-8", errors="replace")


def normalize_event(raw_event: FileSystemEvent) -> list[FsEvent]:
    """Transform a watchdog event into zero or more filesystem events.

    A move yields a rename for the source entry and a create for the
    destination, which is how an editor's "write temp file, rename over
    target" save shows up. Directory events and open/close notifications
    produce nothing, so reading the file never looks like a change.

    Args:
        raw_event: Raw watchdog filesystem event.

    Returns:
        Normalized events, possibly empty.
    """
    if raw_event.is_directory:
        return []

    if isinstance(raw_event, FileMovedEvent):
        return [
            FsEvent(path=decode_path(raw_event.src_path), kind=ChangeKind.RENAME),
            FsEvent(path=decode_path(raw_event.dest_path), kind=ChangeKind.CREATE),
        ]

    kind = KIND_MAP.get(type(raw_event))
    if kind is None:
        return []

    return [FsEvent(path=decode_path(raw_event.src_path), kind=kind)]

