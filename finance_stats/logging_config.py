"""Logging setup for hosts that embed the engine.

Modules log through ``logging.getLogger(__name__)``; nothing is emitted
until the host calls :func:`configure_logging` or configures the root
logger itself.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .config import get_settings

LOGGER_NAME = "finance_stats"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_ATTR = "_finance_stats_handler"


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Args:
        level: Log level name or number. Defaults to ``FINSTATS_LOG_LEVEL``.

    Returns:
        The configured ``finance_stats`` logger.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    resolved = level if level is not None else get_settings().log_level
    if isinstance(resolved, str):
        resolved = resolved.upper()
    logger.setLevel(resolved)

    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    return logger
