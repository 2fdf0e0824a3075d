"""Logging setup for the search proxy."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup.

    Uvicorn installs its own handlers for its loggers; this only sets up
    the ``search_proxy`` hierarchy and the root fallback.
    """
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    logging.getLogger("search_proxy").setLevel(level.upper())
    # httpx logs every request at INFO, which would repeat our own attempt logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
