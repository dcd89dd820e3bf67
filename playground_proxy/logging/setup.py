"""Logging configuration for the proxy."""

import logging
import os
import sys

LOGGER_NAME = "playground-proxy"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Set up logging with proper handlers and formatters."""
    level_name = (level or os.getenv("PLAYGROUND_PROXY_LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console_handler)

    # Propagate so pytest's caplog and platform log collectors see records
    logger.propagate = True

    return logger


# Global logger instance
logger = setup_logging()
