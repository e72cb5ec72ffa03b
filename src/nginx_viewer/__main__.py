"""Entry point for the viewer server."""

import argparse
import asyncio
import sys
from collections.abc import Sequence

import structlog
import uvicorn

from nginx_viewer.app import create_app
from nginx_viewer.config import Settings
from nginx_viewer.logging import configure_logging
from nginx_viewer.version import version_banner

logger = structlog.get_logger()

EXIT_STARTUP_FAILURE = 1


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line flags.

    Flags left unset fall back to environment settings.

    Args:
        argv: Arguments to parse, defaults to sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="nginx-config-viewer",
        description="Serve an nginx config file and push live reloads to browsers.",
    )
    parser.add_argument("--addr", help="listen address, [host]:port (default :8080)")
    parser.add_argument("--path", help="nginx.conf path (default /etc/nginx/nginx.conf)")
    parser.add_argument(
        "--cors",
        action="store_true",
        default=None,
        help="allow CORS on /raw (off by default)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="enable debug logging and API docs",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="show version information",
    )
    return parser.parse_args(argv)


def parse_addr(addr: str) -> tuple[str, int]:
    """Split a ``[host]:port`` listen address.

    Args:
        addr: Address such as ``:8080`` or ``127.0.0.1:9000``.

    Returns:
        Tuple of (host, port); an empty host binds all interfaces.

    Raises:
        ValueError: If the address has no valid port.
    """
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    try:
        port = int(port_text)
    except ValueError as e:
        raise ValueError(f"invalid port in address {addr!r}") from e
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range in address {addr!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port


def build_settings(args: argparse.Namespace) -> Settings:
    """Merge command line flags over environment settings.

    Args:
        args: Parsed command line flags.

    Returns:
        Effective settings.

    Raises:
        ValueError: If --addr cannot be parsed.
    """
    overrides: dict[str, object] = {}
    if args.addr is not None:
        overrides["host"], overrides["port"] = parse_addr(args.addr)
    if args.path is not None:
        overrides["conf_path"] = args.path
    if args.cors is not None:
        overrides["allow_cors"] = args.cors
    if args.debug is not None:
        overrides["debug"] = args.debug
    return Settings(**overrides)


async def serve(settings: Settings) -> bool:
    """Run uvicorn until it exits.

    Args:
        settings: Server configuration.

    Returns:
        True if the server started, False if startup failed.
    """
    app = create_app(settings)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
        lifespan="on",
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    server = uvicorn.Server(config)

    logger.info(
        "listening",
        addr=f"{settings.host}:{settings.port}",
        path=str(settings.tracked_path),
    )
    await server.serve()
    return server.started


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for python -m nginx_viewer."""
    args = parse_args(argv)

    if args.version:
        print(version_banner())
        return

    try:
        settings = build_settings(args)
        tracked_path = settings.tracked_path
    except (ValueError, OSError) as e:
        configure_logging()
        logger.error("startup_failed", error=str(e))
        sys.exit(EXIT_STARTUP_FAILURE)

    configure_logging(debug=settings.debug, json_logs=settings.log_json)

    try:
        started = asyncio.run(serve(settings))
    except KeyboardInterrupt:
        started = True

    if not started:
        logger.error("startup_failed", path=str(tracked_path))
        sys.exit(EXIT_STARTUP_FAILURE)

    sys.exit(0)


if __name__ == "__main__":
    main()
