"""Pytest configuration and fixtures."""

import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from nginx_viewer.app import create_app
from nginx_viewer.config import Settings

NGINX_CONF = """\
worker_processes 1;

events {
    worker_connections 1024;
}

http {
    server {
        listen 80;
        location / {
            root /usr/share/nginx/html;
        }
    }
}
"""


class FakeHandle:
    """Scheduled call recorded by FakeScheduler."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for the event loop's call_later."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def call_later(
        self,
        delay: float,
        callback: Callable[..., object],
        *args: Any,
    ) -> FakeHandle:
        handle = FakeHandle(self.now + delay, lambda: callback(*args))
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every call that comes due."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.fired = True
            handle.callback()
        self.now = target


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    """Create a manual scheduler."""
    return FakeScheduler()


@pytest.fixture
def conf_file(tmp_path: Path) -> Path:
    """Create a tracked nginx config file."""
    path = tmp_path / "nginx.conf"
    path.write_text(NGINX_CONF)
    return path


@pytest.fixture
def settings(conf_file: Path) -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8080,
        conf_path=str(conf_file),
        debug=True,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Create test client with the lifespan running."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
