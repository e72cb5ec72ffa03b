"""Events subsystem: tracked-file watching and SSE broadcasting."""
from nginx_viewer.events.bus import EventBus
from nginx_viewer.events.hub import BroadcastHub
from nginx_viewer.events.types import ChangeKind, FsEvent, Subscriber
from nginx_viewer.events.watcher import ChangeDetector

__all__ = [
    "BroadcastHub",
    "ChangeDetector",
    "ChangeKind",
    "EventBus",
    "FsEvent",
    "Subscriber",
]
