"""Security-first path resolution for web UI assets."""
from pathlib import Path

INDEX_FILE = "index.html"


class SecurityError(Exception):
    """Raised when a path operation violates security constraints."""

    def __init__(self, message: str, path: str) -> None:
        """Initialize security error.

        Args:
            message: Error description.
            path: The offending path value.
        """
        super().__init__(message)
        self.path = path


def request_path_to_asset(url_path: str) -> str:
    """Map a URL path to a relative asset name.

    Args:
        url_path: Request path, e.g. ``/assets/app.js``.

    Returns:
        Relative asset name; the root maps to the entry page.
    """
    name = url_path.lstrip("/")
    return name or INDEX_FILE


def resolve_path(root: Path, name: str) -> Path:
    """Resolve an asset name to an absolute path within the asset root.

    Performs security validation to prevent directory traversal attacks.

    Args:
        root: Asset root directory.
        name: Relative asset name.

    Returns:
        Absolute Path object for the resolved location.

    Raises:
        SecurityError: If the name contains null bytes, traversal sequences,
            or resolves outside the asset root.
    """
    if "\0" in name:
        raise SecurityError("Path contains null byte", name)

    if ".." in Path(name).parts:
        raise SecurityError("Path contains directory traversal sequence", name)

    root_path = root.resolve()
    resolved = (root_path / name).resolve()

    if resolved != root_path and root_path not in resolved.parents:
        raise SecurityError(f"Path resolves outside asset root: {root_path}", name)

    return resolved
