"""Static web UI assets with single-page-app fallback."""
from pathlib import Path

import structlog

from nginx_viewer.content.paths import (
    INDEX_FILE,
    SecurityError,
    request_path_to_asset,
    resolve_path,
)

logger = structlog.get_logger()

CONTENT_TYPES: dict[str, str] = {
    ".js": "application/javascript",
    ".css": "text/css",
    ".html": "text/html",
    ".json": "application/json",
}


class Asset:
    """A resolved asset ready to be served.

    Attributes:
        name: Asset name relative to the root.
        content: File bytes.
        media_type: Content type, or None when the extension is unknown.
        fallback: Whether this is the entry page served for an unknown path.
    """

    def __init__(
        self,
        name: str,
        content: bytes,
        media_type: str | None,
        fallback: bool = False,
    ) -> None:
        self.name = name
        self.content = content
        self.media_type = media_type
        self.fallback = fallback


def content_type_for(name: str) -> str | None:
    """Look up the content type for an asset name by extension."""
    return CONTENT_TYPES.get(Path(name).suffix.lower())


class StaticAssets:
    """File-content provider for the packaged web UI.

    Any path that does not name a file under the root is answered with
    the entry page, which lets the browser-side router handle it.

    Attributes:
        root: Directory holding the assets.
    """

    def __init__(self, root: Path) -> None:
        """Initialize asset provider.

        Args:
            root: Directory holding the built web UI.
        """
        self._root = root

    @property
    def root(self) -> Path:
        """Directory holding the assets."""
        return self._root

    def _read(self, name: str) -> bytes | None:
        try:
            path = resolve_path(self._root, name)
        except SecurityError as e:
            logger.warning("asset_security_error", path=e.path, error=str(e))
            return None

        if not path.is_file():
            return None

        try:
            return path.read_bytes()
        except OSError as e:
            logger.warning("asset_read_error", path=str(path), error=str(e))
            return None

    def get(self, url_path: str) -> Asset | None:
        """Find the asset for a request path.

        Args:
            url_path: Request path.

        Returns:
            The named asset, the entry page as fallback, or None when even
            the entry page is missing.
        """
        name = request_path_to_asset(url_path)
        content = self._read(name)
        if content is not None:
            return Asset(name, content, content_type_for(name))

        index = self._read(INDEX_FILE)
        if index is None:
            return None
        return Asset(INDEX_FILE, index, CONTENT_TYPES[".html"], fallback=True)
