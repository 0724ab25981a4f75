"""Process-wide logging setup for SentWatch.

All modules call `get_logger(__name__)`. The first call installs one stream
handler on the root logger; later calls only adjust levels. Request-level
chatter from the HTTP and Google client libraries is held at WARNING, since
httpx logs every WhatsApp call URL (which carries the phone-number id).
"""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

_QUIET_LIBRARIES: Final[tuple[str, ...]] = (
    "httpx",
    "httpcore",
    "googleapiclient.discovery",
    "googleapiclient.discovery_cache",
)

_configured = False


def _level_from_env() -> int:
    name = os.getenv("SENTWATCH_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _configure_root(level: int) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)

    for library in _QUIET_LIBRARIES:
        logging.getLogger(library).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, installing the shared handler on first use."""
    global _configured

    level = _level_from_env()
    if not _configured:
        _configure_root(level)
        _configured = True

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
