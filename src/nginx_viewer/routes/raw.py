"""Raw content endpoint for the tracked configuration file."""
import asyncio

import structlog
from fastapi import APIRouter, HTTPException, Request, Response, status

from nginx_viewer.content.loader import (
    FileSystemError,
    etag_matches,
    read_tracked_file,
)

logger = structlog.get_logger()

router = APIRouter(tags=["raw"])


@router.get(
    "/raw",
    response_class=Response,
    responses={
        200: {"content": {"text/plain": {}}},
        304: {"description": "Not modified"},
        404: {"description": "Tracked file not readable"},
    },
    summary="Get the tracked file",
    description="Returns the tracked configuration file verbatim, read fresh from disk.",
)
async def get_raw(request: Request) -> Response:
    """Serve the tracked file with weak ETag and Last-Modified validators.

    Args:
        request: FastAPI request object.

    Returns:
        The file content, or an empty 304 when If-None-Match carries the
        current validator.

    Raises:
        HTTPException: 404 if the file cannot be read.
    """
    settings = request.app.state.settings

    try:
        tracked = await asyncio.to_thread(read_tracked_file, settings.tracked_path)
    except FileSystemError as e:
        logger.warning("raw_read_error", path=e.path, code=e.code, error=str(e))
        raise HTTPException(status_code=404, detail=str(e)) from e

    headers = {
        "ETag": tracked.etag,
        "Last-Modified": tracked.last_modified,
    }

    if etag_matches(request.headers.get("If-None-Match"), tracked.etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    if settings.allow_cors:
        headers["Access-Control-Allow-Origin"] = "*"

    return Response(
        content=tracked.content,
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )
