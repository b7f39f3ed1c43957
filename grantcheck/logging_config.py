"""Logging setup for the grantcheck command line.

The library modules only create loggers; handlers are installed here.
"""

import logging
from typing import Union

from grantcheck.exceptions import GrantCheckError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class KnownErrorFormatter(logging.Formatter):
    """Formatter that drops stack traces for grantcheck errors.

    A ``GrantCheckError`` is a reported condition (bad manifest, missing
    permission), not a crash, so the message alone is enough.
    """

    def formatException(self, ei):  # noqa: N802
        if not ei or isinstance(ei[1], GrantCheckError):
            return ""
        return super().formatException(ei)


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Attach a single stream handler to the ``grantcheck`` logger.

    Calling it again replaces the handler instead of stacking a new one.

    Args:
        level: Log level as number or name

    Returns:
        The package logger
    """
    package_logger = logging.getLogger("grantcheck")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if getattr(handler, "_grantcheck_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(KnownErrorFormatter(LOG_FORMAT))
    handler._grantcheck_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    return package_logger


__all__ = ["KnownErrorFormatter", "configure_logging", "LOG_FORMAT"]
