"""Content module: the tracked file and the web UI assets."""

from nginx_viewer.content.assets import Asset, StaticAssets, content_type_for
from nginx_viewer.content.loader import (
    FileSystemError,
    TrackedFile,
    etag_matches,
    read_tracked_file,
    weak_etag,
)
from nginx_viewer.content.paths import SecurityError, resolve_path

__all__ = [
    "Asset",
    "FileSystemError",
    "SecurityError",
    "StaticAssets",
    "TrackedFile",
    "content_type_for",
    "etag_matches",
    "read_tracked_file",
    "resolve_path",
    "weak_etag",
]
