"""SSE stream generation for change notifications."""

import asyncio
import contextlib
from collections.abc import AsyncIterator

import structlog
from sse_starlette import ServerSentEvent

from nginx_viewer.events.bus import EventBus
from nginx_viewer.events.types import GREETING, HEARTBEAT_COMMENT, Subscriber

logger = structlog.get_logger()

SSE_SEPARATOR = "\n"


def data_event(payload: str) -> ServerSentEvent:
    """Build a content message, framed as ``data: <payload>``."""
    return ServerSentEvent(data=payload, sep=SSE_SEPARATOR)


def heartbeat_event() -> ServerSentEvent:
    """Build a content-free keep-alive comment."""
    return ServerSentEvent(comment=HEARTBEAT_COMMENT, sep=SSE_SEPARATOR)


class BroadcastHub:
    """Per-connection SSE streams fed by the event bus.

    Each stream registers a subscriber, greets the client, and then
    relays change signals and periodic heartbeats until the subscriber
    is closed or the connection goes away.

    Attributes:
        heartbeat_interval: Seconds between heartbeat comments.
    """

    def __init__(
        self,
        event_bus: EventBus,
        heartbeat_interval: float = 30.0,
    ) -> None:
        """Initialize broadcast hub.

        Args:
            event_bus: Subscriber registry.
            heartbeat_interval: Seconds between heartbeats.
        """
        self._bus = event_bus
        self._heartbeat_interval = heartbeat_interval
        self._active_connections = 0

    @property
    def heartbeat_interval(self) -> float:
        """Seconds between heartbeat comments."""
        return self._heartbeat_interval

    @property
    def active_connections(self) -> int:
        """Number of open SSE streams."""
        return self._active_connections

    async def create_sse_generator(self) -> AsyncIterator[ServerSentEvent]:
        """Create the event stream for one client connection.

        The subscriber is unregistered when the generator finishes, which
        happens when the bus closes it, or when the response task is
        cancelled because the client disconnected.

        Yields:
            The greeting, then change signals and heartbeats.
        """
        subscriber = self._bus.register()
        self._active_connections += 1

        logger.info(
            "sse_client_connected",
            subscriber_id=subscriber.id,
            active_connections=self._active_connections,
        )

        try:
            yield data_event(GREETING)
            async with contextlib.aclosing(self.relay(subscriber)) as events:
                async for event in events:
                    yield event
        finally:
            self._bus.unregister(subscriber)
            self._active_connections -= 1

            logger.info(
                "sse_client_disconnected",
                subscriber_id=subscriber.id,
                active_connections=self._active_connections,
            )

    async def relay(self, subscriber: Subscriber) -> AsyncIterator[ServerSentEvent]:
        """Wait on closure, inbox and heartbeat tick, yielding what arrives.

        Heartbeats follow a fixed schedule from the start of the relay and
        are not pushed back by delivered signals.

        Args:
            subscriber: Registered subscriber to read from.

        Yields:
            A data event per signal and a comment per heartbeat tick.
        """
        loop = asyncio.get_running_loop()
        interval = self._heartbeat_interval
        next_tick = loop.time() + interval

        closed = asyncio.ensure_future(subscriber.closed.wait())
        receive: asyncio.Future[str] | None = None

        try:
            while True:
                if receive is None:
                    receive = asyncio.ensure_future(subscriber.inbox.get())

                timeout = max(0.0, next_tick - loop.time())
                done, _ = await asyncio.wait(
                    {closed, receive},
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if closed in done:
                    return

                if receive in done:
                    signal = receive.result()
                    receive = None
                    yield data_event(signal)
                    continue

                now = loop.time()
                next_tick += interval
                while next_tick <= now:
                    next_tick += interval
                yield heartbeat_event()
        finally:
            for task in (closed, receive):
                if task is not None and not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

    def shutdown(self) -> None:
        """Close every open stream."""
        logger.info(
            "broadcast_hub_shutdown",
            active_connections=self._active_connections,
            dropped_signals=self._bus.dropped_signals,
        )
        self._bus.close()
