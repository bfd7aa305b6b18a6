# app/core/logging_config.py
"""
Logging setup for the shipping service.

LOG_LEVEL controls the app loggers, LOG_FORMAT overrides the line format.
Carrier HTTP traffic is logged by our own clients, so the transport
libraries are held at WARNING.
"""

import logging
import os

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "uvicorn.access",
)


def configure_logging():
    """Configure the root handler and per-library levels from the environment"""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=level,
        format=os.environ.get("LOG_FORMAT", DEFAULT_FORMAT),
        handlers=[logging.StreamHandler()]
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("app").setLevel(level)

    logging.getLogger(__name__).info(f"Logging configured at level: {log_level}")


configure_logging()
