"""Build information, stamped by the release pipeline."""
import os

NAME = "nginx-config-viewer"
VERSION = os.environ.get("NGINX_VIEWER_BUILD_VERSION", "dev")
COMMIT = os.environ.get("NGINX_VIEWER_BUILD_COMMIT", "unknown")
BUILD_DATE = os.environ.get("NGINX_VIEWER_BUILD_DATE", "unknown")


def version_banner() -> str:
    """Multi-line version text printed by ``--version``."""
    return f"{NAME} {VERSION}\n  commit: {COMMIT}\n  built:  {BUILD_DATE}"
