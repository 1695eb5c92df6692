"""Console logging for the ``rational`` package."""
import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "[{asctime}] [{levelname:<8}] [{name}] {message}"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "rational-console"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    logger: Optional[logging.Logger] = None,
) -> logging.Logger:
    """Attach a stderr handler to *logger* (the package logger by default).

    Calling this again only updates the level.
    """
    if logger is None:
        logger = logging.getLogger("rational")
    if isinstance(level, str):
        level = level.upper()

    if not any(handler.get_name() == HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT, style="{"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = ["setup_logging", "LOG_FORMAT", "DATE_FORMAT", "HANDLER_NAME"]
