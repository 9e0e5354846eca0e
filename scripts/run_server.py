#!/usr/bin/env python3
"""Dev entrypoint for running the Task API.

Usage:
    # Defaults from HOST / PORT (0.0.0.0:8000)
    python scripts/run_server.py

    # Auto-reload on code changes
    python scripts/run_server.py --reload

    # Custom bind address
    python scripts/run_server.py --host 127.0.0.1 --port 3000

Environment variables:
    MONGODB_URL: MongoDB connection string (default: mongodb://localhost:27017)
    MONGODB_DATABASE: Database name (default: taskapi)
    JWT_SECRET: Token signing secret (required in production)
    JWT_EXPIRATION_HOURS: Token lifetime in hours (default: 24)
    ENVIRONMENT: development or production (default: development)
    LOG_LEVEL: Root log level (default: INFO)
"""

import argparse
import logging
import sys

import uvicorn

from taskapi.config import configure_logging, get_settings


def main() -> int:
    """Main entrypoint for the API server."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Run the Task API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--host", default=settings.HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Bind port")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when code changes",
    )

    # Logging
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    level = "DEBUG" if args.verbose else settings.LOG_LEVEL
    configure_logging(level)
    logger = logging.getLogger(__name__)

    try:
        settings.validate()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(f"Starting Task API on {args.host}:{args.port}")
    uvicorn.run(
        "taskapi.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
