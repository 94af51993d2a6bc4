"""
Logging setup shared by routes, services and middleware
"""

import logging
import os
import sys

DEFAULT_LOGGER_NAME = "bookshelf"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Return a console logger, configuring it on first use

    Args:
        name: Logger name (defaults to the application logger)

    Returns:
        Configured logging.Logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
        logger.propagate = False

    return logger
