"""In-memory subscriber registry with non-blocking fan-out."""
import asyncio
import threading

import structlog

from nginx_viewer.events.types import Subscriber

logger = structlog.get_logger()


class EventBus:
    """Registry of streaming subscribers with best-effort broadcast.

    Every subscriber owns a bounded inbox. Broadcasting copies a signal
    into each inbox without waiting; a full inbox simply misses that
    signal. Nothing is retained for subscribers that register later.

    The registry lock covers registry reads, mutations and the snapshot
    taken for broadcasting. Delivery runs outside the lock.

    Attributes:
        inbox_size: Capacity of each subscriber inbox.
    """

    def __init__(self, inbox_size: int = 8) -> None:
        """Initialize event bus.

        Args:
            inbox_size: Maximum pending signals per subscriber.
        """
        self._subscribers: dict[str, Subscriber] = {}
        self._inbox_size = inbox_size
        self._dropped_count = 0
        self._lock = threading.Lock()

    @property
    def inbox_size(self) -> int:
        """Capacity of each subscriber inbox."""
        return self._inbox_size

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        with self._lock:
            return len(self._subscribers)

    @property
    def dropped_signals(self) -> int:
        """Total number of signals dropped because an inbox was full."""
        return self._dropped_count

    def register(self) -> Subscriber:
        """Create a subscriber and add it to the registry.

        Returns:
            The new subscriber; read signals from its inbox.
        """
        subscriber = Subscriber(inbox=asyncio.Queue(maxsize=self._inbox_size))
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
        logger.debug("subscriber_registered", subscriber_id=subscriber.id)
        return subscriber

    def unregister(self, subscriber: Subscriber) -> None:
        """Remove a subscriber from the registry and close it.

        Safe to call more than once for the same subscriber.

        Args:
            subscriber: Subscriber returned by register().
        """
        with self._lock:
            removed = self._subscribers.pop(subscriber.id, None)
        subscriber.closed.set()
        if removed is not None:
            logger.debug("subscriber_removed", subscriber_id=subscriber.id)

    def broadcast(self, signal: str) -> int:
        """Offer a signal to every registered subscriber.

        Args:
            signal: Payload to deliver.

        Returns:
            Number of subscribers whose inbox accepted the signal.
        """
        with self._lock:
            subscribers = list(self._subscribers.values())

        delivered = 0
        total = 0
        for subscriber in subscribers:
            # unregistered after the snapshot
            if subscriber.is_closed:
                continue
            total += 1
            try:
                subscriber.inbox.put_nowait(signal)
                delivered += 1
            except asyncio.QueueFull:
                self._dropped_count += 1

        if delivered < total:
            logger.debug(
                "signal_dropped",
                signal=signal,
                delivered_to=delivered,
                dropped_total=self._dropped_count,
            )
        return delivered

    def close(self) -> None:
        """Unregister every subscriber so open streams can finish."""
        with self._lock:
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()

        for subscriber in subscribers:
            subscriber.closed.set()

        logger.info("event_bus_closed", subscribers=len(subscribers))
