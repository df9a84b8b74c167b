#!/usr/bin/env python3
"""CLI entrypoint for running the aggregator app with Uvicorn."""

import argparse
import logging
import os

import uvicorn

from .config import get_settings
from .services import get_aggregate_store


def main() -> None:
    settings = get_settings()
    default_host = settings.server_host
    default_port = settings.server_port
    default_data_dir = settings.data_dir

    parser = argparse.ArgumentParser(description="Chronos sync server")
    parser.add_argument("--host", default=default_host, help=f"Host to bind (default: {default_host})")
    parser.add_argument("--port", type=int, default=default_port, help=f"Port to bind (default: {default_port})")
    parser.add_argument(
        "--data-dir",
        default=str(default_data_dir),
        help=f"Directory holding the aggregate store (default: {default_data_dir})",
    )
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    # The store and settings are cached; reset them so the chosen directory wins
    os.environ["CHRONOS_DATA_DIR"] = args.data_dir
    get_settings.cache_clear()
    get_aggregate_store.cache_clear()

    # Reduce uvicorn access log noise - only show warnings and errors
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("watchfiles.main").setLevel(logging.WARNING)

    if args.reload:
        # For reload mode, use import string
        uvicorn.run(
            "chronos.app:app",
            host=args.host,
            port=args.port,
            reload=True,
            log_level="info",
            access_log=False,
        )
    else:
        from .app import app

        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_level="info",
            access_log=False,
        )


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
