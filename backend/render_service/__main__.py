"""
Entry point for the render server.

usage:
    python -m render_service --port 3002 --temp-dir ./temp
"""
import argparse
import sys

import uvicorn

from render_service.core.config import settings
from render_service.core.errors import install_exception_hooks
from render_service.core.logging_config import configure_logging, get_logger

logger = get_logger("render_service")


def build_bind_options(host: str, port: str) -> dict:
    """
    a numeric PORT binds tcp; anything else (a socket or pipe path handed to
    us by the hosting platform) is passed to uvicorn untouched
    """
    if port.isdigit():
        return {"host": host, "port": int(port)}
    return {"uds": port}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="video render job server")
    parser.add_argument("--host", default=settings.HOST, help="bind host for tcp ports")
    parser.add_argument("--port", default=settings.PORT, help="port number or socket path")
    parser.add_argument("--temp-dir", default=settings.TEMP_DIR, help="working directory for renders")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="root log level")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    settings.HOST = args.host
    settings.PORT = str(args.port)
    settings.TEMP_DIR = args.temp_dir
    settings.LOG_LEVEL = args.log_level

    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    install_exception_hooks()

    try:
        # imported late so the app picks up the overrides above
        from render_service.main import app
    except Exception as e:
        logger.critical(f"could not load the render server application: {e}", exc_info=True)
        return 1

    bind = build_bind_options(settings.HOST, settings.PORT)
    logger.info(f"Render Server live on {settings.PORT}")

    # uvicorn drains in-flight responses on SIGTERM/SIGINT before running shutdown
    uvicorn.run(
        app,
        **bind,
        timeout_keep_alive=settings.KEEP_ALIVE_SECONDS,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_config=None,
    )
    logger.info("HTTP server closed")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
