"""
Logging utilities for the Blobstream toolkit.

Every verification stage logs through a logger obtained here, so a run
reads as one ordered trace: which stage started, with which identifiers,
and how it ended. The level can be overridden with the BS_LOG_LEVEL
environment variable.
"""

import logging
import os
from typing import Any, Mapping, Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger with a single stream handler attached.

    The handler is only attached the first time a given logger name is
    requested; later calls return the same configured logger.
    """
    logger = logging.getLogger(name if name else "blobstream_toolkit")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)

        level_name = os.getenv("BS_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))

    return logger


def format_context(context: Mapping[str, Any]) -> str:
    """Render identifiers as ``key=value`` pairs for log lines.

    Bytes are shown as 0x-prefixed hex so hashes can be pasted into an
    explorer directly.
    """
    parts = []
    for key, value in context.items():
        if isinstance(value, (bytes, bytearray)):
            value = "0x" + bytes(value).hex()
        parts.append(f"{key}={value}")
    return " ".join(parts)
