"""Web UI asset serving with single-page-app fallback."""
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, Response

if TYPE_CHECKING:
    from nginx_viewer.content.assets import StaticAssets

router = APIRouter(tags=["static"])

# Paths under these prefixes never fall back to the web UI.
RESERVED_PREFIXES = ("/raw", "/events")


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_asset(request: Request, full_path: str) -> Response:
    """Serve a web UI asset, or the entry page for unknown paths.

    Must be registered after every other route.

    Args:
        request: FastAPI request object.
        full_path: Requested path below the root.

    Returns:
        Asset content with an extension-based content type.

    Raises:
        HTTPException: 404 for reserved endpoint prefixes, or if the entry
            page itself is missing.
    """
    if request.url.path.startswith(RESERVED_PREFIXES):
        raise HTTPException(status_code=404, detail="Not Found")

    assets: StaticAssets = request.app.state.static_assets

    asset = assets.get(request.url.path)
    if asset is None:
        raise HTTPException(status_code=404, detail="Not Found")

    return Response(content=asset.content, media_type=asset.media_type)
