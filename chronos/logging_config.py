from __future__ import annotations

import logging

logger = logging.getLogger("chronos")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging with a fixed format."""
    if logger.handlers or logging.getLogger().handlers:
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
