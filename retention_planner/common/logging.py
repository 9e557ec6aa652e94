"""
Logging configuration helpers.

Centralizes process-wide logging setup for the CLI and any embedding
application.
"""

import logging
import os
from typing import Optional

LOG_LEVEL_ENV_VAR = "RETENTION_PLANNER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGING_CONFIGURED = False


def resolve_log_level(level: Optional[str] = None) -> int:
    """Resolve a level name from the argument or the environment.

    Unknown level names fall back to INFO.
    """
    level_name = level or os.getenv(LOG_LEVEL_ENV_VAR, "WARNING")
    resolved = getattr(logging, level_name.upper(), None)
    if not isinstance(resolved, int):
        return logging.INFO
    return resolved


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)
    _LOGGING_CONFIGURED = True
