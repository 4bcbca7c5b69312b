"""
Logging setup.

Modules get their logger with get_logger(__name__). configure_logging() installs
a single stream handler on the root logger using the level and format from
LoggingSettings; it is safe to call more than once and leaves existing handlers
(e.g. pytest's capture handlers) in place.
"""

import logging
import sys
from typing import Optional, Union

from scoped_io.config.settings import get_settings

_configured_level: Optional[Union[str, int]] = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    level: Optional[Union[str, int]] = None,
    fmt: Optional[str] = None,
) -> Union[str, int]:
    """
    Configure root logging once with a consistent format.

    Args:
        level: Log level name or number. Defaults to SCOPED_IO_LOG_LEVEL.
        fmt: Format string. Defaults to SCOPED_IO_LOG_FORMAT.

    Returns:
        The level that was applied.
    """
    global _configured_level

    settings = get_settings().logging
    if isinstance(level, str):
        level = level.upper()
    if level is None:
        level = settings.level
    fmt = fmt if fmt is not None else settings.format

    if _configured_level == level:
        return level
    _configured_level = level

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
    root.setLevel(level)
    return level
