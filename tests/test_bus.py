"""Event bus registry and fan-out tests."""

import asyncio
import random

from nginx_viewer.events.bus import EventBus
from nginx_viewer.events.types import RELOAD_SIGNAL


class TestRegistration:
    """Register and unregister bookkeeping."""

    def test_register_adds_subscriber(self) -> None:
        bus = EventBus()
        subscriber = bus.register()
        assert bus.subscriber_count == 1
        assert not subscriber.is_closed
        assert subscriber.inbox.maxsize == 8

    def test_subscribers_have_unique_ids(self) -> None:
        bus = EventBus()
        ids = {bus.register().id for _ in range(20)}
        assert len(ids) == 20

    def test_unregister_removes_and_closes(self) -> None:
        bus = EventBus()
        subscriber = bus.register()
        bus.unregister(subscriber)
        assert bus.subscriber_count == 0
        assert subscriber.is_closed

    def test_double_unregister_is_noop(self) -> None:
        bus = EventBus()
        subscriber = bus.register()
        other = bus.register()
        bus.unregister(subscriber)
        bus.unregister(subscriber)
        assert bus.subscriber_count == 1
        assert not other.is_closed

    def test_inbox_size_is_configurable(self) -> None:
        bus = EventBus(inbox_size=2)
        assert bus.register().inbox.maxsize == 2


class TestBroadcast:
    """Non-blocking delivery to every registered inbox."""

    def test_broadcast_reaches_every_subscriber(self) -> None:
        bus = EventBus()
        subscribers = [bus.register() for _ in range(3)]
        delivered = bus.broadcast(RELOAD_SIGNAL)
        assert delivered == 3
        for subscriber in subscribers:
            assert subscriber.inbox.get_nowait() == RELOAD_SIGNAL

    def test_broadcast_with_no_subscribers(self) -> None:
        bus = EventBus()
        assert bus.broadcast(RELOAD_SIGNAL) == 0

    def test_full_inbox_drops_without_blocking(self) -> None:
        bus = EventBus(inbox_size=1)
        stalled = bus.register()
        fresh = bus.register()
        bus.broadcast("first")
        fresh.inbox.get_nowait()

        delivered = bus.broadcast("second")

        assert delivered == 1
        assert bus.dropped_signals == 1
        assert stalled.inbox.get_nowait() == "first"
        assert stalled.inbox.empty()
        assert fresh.inbox.get_nowait() == "second"

    def test_drained_subscriber_receives_next_signal(self) -> None:
        bus = EventBus(inbox_size=1)
        subscriber = bus.register()
        bus.broadcast("a")
        bus.broadcast("b")
        assert subscriber.inbox.get_nowait() == "a"
        bus.broadcast("c")
        assert subscriber.inbox.get_nowait() == "c"

    def test_unregistered_subscriber_receives_nothing(self) -> None:
        bus = EventBus()
        subscriber = bus.register()
        bus.unregister(subscriber)
        bus.broadcast(RELOAD_SIGNAL)
        assert subscriber.inbox.empty()

    def test_subscriber_closed_after_snapshot_is_skipped(self) -> None:
        bus = EventBus()
        subscriber = bus.register()
        other = bus.register()
        subscriber.closed.set()

        assert bus.broadcast(RELOAD_SIGNAL) == 1
        assert subscriber.inbox.empty()
        assert other.inbox.get_nowait() == RELOAD_SIGNAL
        assert bus.dropped_signals == 0

    def test_delivery_runs_outside_registry_lock(self) -> None:
        bus = EventBus()
        lock_held = []

        class RecordingQueue(asyncio.Queue):
            def put_nowait(self, item: str) -> None:
                lock_held.append(bus._lock.locked())
                super().put_nowait(item)

        subscriber = bus.register()
        subscriber.inbox = RecordingQueue(maxsize=bus.inbox_size)

        assert bus.broadcast(RELOAD_SIGNAL) == 1
        assert lock_held == [False]
        assert subscriber.inbox.get_nowait() == RELOAD_SIGNAL

    def test_late_subscriber_does_not_see_earlier_signal(self) -> None:
        bus = EventBus()
        bus.broadcast(RELOAD_SIGNAL)
        subscriber = bus.register()
        assert subscriber.inbox.empty()

    def test_close_closes_all_subscribers(self) -> None:
        bus = EventBus()
        subscribers = [bus.register() for _ in range(3)]
        bus.close()
        assert bus.subscriber_count == 0
        assert all(s.is_closed for s in subscribers)
        assert bus.broadcast(RELOAD_SIGNAL) == 0

    def test_interleaved_operations_keep_delivery_invariants(self) -> None:
        rng = random.Random(1234)
        bus = EventBus(inbox_size=3)
        active = []
        removed = []

        for step in range(500):
            op = rng.choice(["register", "unregister", "broadcast", "drain"])
            if op == "register":
                active.append(bus.register())
            elif op == "unregister" and active:
                subscriber = active.pop(rng.randrange(len(active)))
                bus.unregister(subscriber)
                removed.append((subscriber, subscriber.inbox.qsize()))
            elif op == "drain" and active:
                subscriber = rng.choice(active)
                while not subscriber.inbox.empty():
                    subscriber.inbox.get_nowait()
            elif op == "broadcast":
                sizes = {s.id: s.inbox.qsize() for s in active}
                with_room = [s for s in active if not s.inbox.full()]
                delivered = bus.broadcast(f"signal-{step}")
                assert delivered == len(with_room)
                for subscriber in active:
                    expected = min(sizes[subscriber.id] + 1, bus.inbox_size)
                    assert subscriber.inbox.qsize() == expected

        assert bus.subscriber_count == len(active)
        for subscriber, size_at_removal in removed:
            assert subscriber.is_closed
            assert subscriber.inbox.qsize() == size_at_removal
