# app/utils/logger.py
"""
Centralised logging configuration for the entire application.
Logs to console and to a rotating file in /logs/.
Login and lookup activity additionally goes to a separate audit file.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
os.makedirs(LOG_DIR, exist_ok=True)

AUDIT_LOGGER_NAME = "lookup.audit"

_FORMAT = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_configured = False
_audit_configured = False


def _rotating_handler(filename: str) -> RotatingFileHandler:
    # Keeps last 10 × 5MB log files
    handler = RotatingFileHandler(
        filename=os.path.join(LOG_DIR, filename),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(_FORMAT)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_FORMAT)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_rotating_handler("lookup.log"))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)


def get_audit_logger() -> logging.Logger:
    """Logger for who logged in / searched what. Also propagates to the root handlers."""
    global _audit_configured
    _configure_root_logger()
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    if not _audit_configured:
        _audit_configured = True
        audit.addHandler(_rotating_handler("audit.log"))
    return audit
