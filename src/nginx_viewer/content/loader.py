"""Reading the tracked configuration file for the raw endpoint."""
import hashlib
import os
from email.utils import formatdate
from pathlib import Path

ETAG_HEX_LENGTH = 16


class FileSystemError(Exception):
    """Raised when file operations fail."""

    def __init__(self, message: str, path: str, code: str | None = None) -> None:
        """Initialize filesystem error.

        Args:
            message: Error description.
            path: Path that caused the error.
            code: Optional error code (e.g., ENOENT).
        """
        super().__init__(message)
        self.path = path
        self.code = code


class TrackedFile:
    """Snapshot of the tracked file taken for one request.

    Attributes:
        content: File bytes, served verbatim.
        etag: Weak validator derived from the content hash.
        last_modified: Modification time in HTTP date format.
    """

    def __init__(self, content: bytes, mtime: float) -> None:
        """Initialize tracked file snapshot.

        Args:
            content: File bytes.
            mtime: Modification time as a POSIX timestamp.
        """
        self.content = content
        self.etag = weak_etag(content)
        self.last_modified = formatdate(mtime, usegmt=True)


def weak_etag(content: bytes) -> str:
    """Build a short weak ETag from the SHA-256 of the content.

    Args:
        content: Bytes to hash.

    Returns:
        Validator of the form ``W/"<16 hex chars>"``.
    """
    digest = hashlib.sha256(content).hexdigest()[:ETAG_HEX_LENGTH]
    return f'W/"{digest}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Check a conditional request header against the current validator.

    Args:
        if_none_match: Raw If-None-Match header value, if any.
        etag: Current validator.

    Returns:
        True if the header lists the validator.
    """
    if not if_none_match:
        return False
    return etag in if_none_match


def read_tracked_file(filepath: Path) -> TrackedFile:
    """Read the tracked file fresh from disk.

    Args:
        filepath: Absolute path to the tracked file.

    Returns:
        Snapshot with content and caching validators.

    Raises:
        FileSystemError: If the file cannot be read.
    """
    try:
        with filepath.open("rb") as f:
            mtime = os.fstat(f.fileno()).st_mtime
            content = f.read()
    except FileNotFoundError as e:
        raise FileSystemError(
            f"File not found: {filepath}",
            str(filepath),
            "ENOENT",
        ) from e
    except PermissionError as e:
        raise FileSystemError(
            f"Permission denied: {filepath}",
            str(filepath),
            "EACCES",
        ) from e
    except IsADirectoryError as e:
        raise FileSystemError(
            f"Not a file: {filepath}",
            str(filepath),
            "EISDIR",
        ) from e
    except OSError as e:
        raise FileSystemError(
            f"Failed to read file: {e}",
            str(filepath),
            getattr(e, "errno", None),
        ) from e

    return TrackedFile(content, mtime)
