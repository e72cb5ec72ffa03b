"""Event types for tracked-file change notification."""
import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

RELOAD_SIGNAL = "reload"
GREETING = "hello"
HEARTBEAT_COMMENT = "ping"


class ChangeKind(str, Enum):
    """Kinds of raw filesystem events the detector reacts to."""

    WRITE = "write"
    CREATE = "create"
    RENAME = "rename"
    REMOVE = "remove"


class FsEvent(BaseModel):
    """Raw filesystem event for an entry in the watched directory.

    Attributes:
        path: Absolute path of the affected entry.
        kind: What happened to the entry.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Absolute path of the affected entry")
    kind: ChangeKind = Field(description="Event kind")


@dataclass(eq=False)
class Subscriber:
    """One streaming client's bounded inbox.

    Owned by a single stream for the lifetime of its connection. The
    ``closed`` event is set once the subscriber has been unregistered.

    Attributes:
        inbox: Bounded queue of pending change signals.
        id: Unique subscriber identifier (UUID).
        closed: Set when the subscriber is removed from the bus.
    """

    inbox: asyncio.Queue[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    closed: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def is_closed(self) -> bool:
        """Whether the subscriber has been unregistered."""
        return self.closed.is_set()
