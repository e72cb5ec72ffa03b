"""Health check endpoints for liveness and readiness probes."""
import os
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness probe.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessCheck(BaseModel):
    """Individual dependency check result.

    Attributes:
        name: Identifier for the dependency being checked.
        status: Result of the check ('ok' or 'failed').
        message: Error details when status is 'failed'.
    """

    name: str
    status: Literal["ok", "failed"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Response model for readiness probe.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
        subscribers: Number of connected streaming clients.
        signals_emitted: Change signals sent since startup.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]
    subscribers: int = 0
    signals_emitted: int = 0


def _check_file(path: Path) -> ReadinessCheck:
    """Verify the tracked file exists and is readable.

    Args:
        path: Absolute path to the tracked file.

    Returns:
        Check result with status and optional error message.
    """
    name = f"file:{path}"
    if not path.is_file():
        return ReadinessCheck(name=name, status="failed", message="File not found")
    if not os.access(path, os.R_OK):
        return ReadinessCheck(name=name, status="failed", message="Permission denied")
    return ReadinessCheck(name=name, status="ok")


def _check_watcher(running: bool, watch_dir: Path) -> ReadinessCheck:
    """Report whether the directory watcher is alive.

    Args:
        running: Watcher liveness flag.
        watch_dir: Directory being watched.

    Returns:
        Check result with status and optional error message.
    """
    name = f"watch:{watch_dir}"
    if running:
        return ReadinessCheck(name=name, status="ok")
    return ReadinessCheck(name=name, status="failed", message="Watcher not running")


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe endpoint.

    Returns immediate success if the process is running.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Validates that the tracked file is readable and the watcher is
    running. Returns 200 if all checks pass, 503 if any fail.

    Args:
        request: FastAPI request object.

    Returns:
        Readiness status with individual check results.
    """
    settings = request.app.state.settings
    detector = request.app.state.detector
    bus = request.app.state.event_bus

    checks = [
        _check_file(settings.tracked_path),
        _check_watcher(detector.is_running, detector.watch_dir),
    ]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
        subscribers=bus.subscriber_count,
        signals_emitted=detector.signals_emitted,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
