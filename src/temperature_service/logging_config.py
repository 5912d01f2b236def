"""Centralized logging configuration."""

import logging
import sys
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "temperature_service"

# Server loggers follow the service level; client libraries log every request at INFO
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi")
LIBRARY_LOGGER_LEVELS: Dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "geopy": logging.WARNING,
    "redis": logging.WARNING,
}


def configure_logging(level: int = logging.INFO, library_level: Optional[int] = None) -> logging.Handler:
    """Route service, server and library logs through one stderr handler.

    Args:
        level: Level for the service package and the uvicorn/FastAPI loggers
        library_level: Overrides the level of the HTTP/geocoding/Redis client
            loggers, which default to WARNING

    Returns:
        The handler attached to the root logger
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(min(level, logging.WARNING))

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    # uvicorn installs its own handlers; strip them so records reach the root handler once
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        for existing in server_logger.handlers[:]:
            server_logger.removeHandler(existing)
        server_logger.propagate = True
        server_logger.setLevel(level)

    for name, default in LIBRARY_LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(library_level if library_level is not None else default)

    return handler
