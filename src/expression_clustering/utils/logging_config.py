"""
Logging helpers.

Library modules obtain loggers through ``get_logger(__name__)``; applications
(or tests) call ``setup_logging()`` once to attach a handler. Importing the
package never configures logging on its own.
"""

import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "expression_clustering"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger for *name* (normally the calling module's ``__name__``)."""
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Args:
        level: Log level name (e.g. ``"DEBUG"``). Defaults to the configured
            ``EXPRESSION_CLUSTERING_LOG_LEVEL``.
        fmt: Log record format. Defaults to ``DEFAULT_FORMAT``.

    Returns:
        The package-level logger.

    Calling this more than once only updates the level.
    """
    global _configured

    if level is None:
        from ..config import config

        level = config.log_level

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
        logger.addHandler(handler)
        _configured = True

    return logger
