"""
Logging setup for the service.

Application loggers follow the configured level; chatty library loggers are
held at WARNING.
"""

from __future__ import annotations

import logging


def configure_logging(level: str = "INFO") -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    for noisy in ("httpx", "httpcore", "redis", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("order_workflow").setLevel(log_level)
    logging.getLogger(__name__).info(
        "Logging configured at level: %s", logging.getLevelName(log_level)
    )
