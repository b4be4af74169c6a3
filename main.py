"""Process entry point.

Builds the application from settings (command line overrides environment
and ``appsettings.json``) and runs uvicorn until the process is signalled.
``uvicorn --factory application:create_app`` works as well.
"""

import argparse
import sys

import structlog
import uvicorn

from application import create_app
from errors import StartupError
from logging_config import configure_logging
from settings import Settings

logger = structlog.get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="FullStackDemo server")
    parser.add_argument("--environment", help="e.g. Development or Production")
    parser.add_argument("--host", help="listen address (default: all interfaces)")
    parser.add_argument("--port", type=int, help="listen port (default: 80)")
    parser.add_argument("--web-root", dest="web_root", help="directory with the SPA build")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    try:
        settings = Settings(**overrides)
    except ValueError as exc:
        # ValidationError, or JSONDecodeError from a malformed appsettings.json
        logger.error("startup_failed", error=str(exc))
        return 1
    configure_logging(settings)

    try:
        app = create_app(settings)
    except StartupError as exc:
        logger.error("startup_failed", error=str(exc), exc_info=True)
        return 1

    logger.info("listener_starting", host=settings.host, port=settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
