"""Viewer configuration loaded from environment variables."""
import os
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_DIR = Path(__file__).parent / "web"


class Settings(BaseSettings):
    """Viewer configuration loaded from environment variables.

    Command line flags, when given, override these values.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port number for the HTTP server.
        conf_path: Configuration file to serve and watch.
        allow_cors: Send a permissive CORS header on /raw.
        debug: Enable debug logging and API documentation.
        log_json: Emit JSON log lines instead of console output.
        debounce_ms: Quiet window before a change signal is sent.
        inbox_size: Pending signals kept per streaming client.
        heartbeat_interval: Seconds between SSE heartbeat comments.
        shutdown_timeout: Seconds to wait for open streams on shutdown.
        static_dir: Directory holding the web UI assets.
    """

    model_config = SettingsConfigDict(
        env_prefix="NGINX_VIEWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8080
    conf_path: str = "/etc/nginx/nginx.conf"
    allow_cors: bool = False
    debug: bool = False
    log_json: bool = True

    debounce_ms: int = 200
    inbox_size: int = 8
    heartbeat_interval: float = 30.0
    shutdown_timeout: float = 5.0
    static_dir: Path = DEFAULT_STATIC_DIR

    @computed_field
    @property
    def tracked_path(self) -> Path:
        """Absolute path of the tracked configuration file.

        Returns:
            conf_path made absolute against the working directory.
        """
        return Path(os.path.abspath(self.conf_path))

    @computed_field
    @property
    def watch_dir(self) -> Path:
        """Directory watched for changes to the tracked file."""
        return self.tracked_path.parent
