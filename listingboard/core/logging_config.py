"""Logging setup shared by the API server and the scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the package logger (idempotent)."""
    global _configured
    logger = logging.getLogger("listingboard")
    logger.setLevel(level.upper())
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package namespace."""
    if not name.startswith("listingboard"):
        name = f"listingboard.{name}"
    return logging.getLogger(name)
