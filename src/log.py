"""Log utilities."""

import logging
from rich.logging import RichHandler

from constants import DEFAULT_LOG_LEVEL


def get_logger(name: str, level: str | int = logging.DEBUG) -> logging.Logger:
    """
    Get a logger configured for Rich console output.

    The returned logger has its handlers replaced with a single RichHandler
    for rich-formatted console output, and propagation to ancestor loggers
    disabled.

    Parameters:
        name (str): Name of the logger to retrieve or create.
        level (str | int): Logging level, DEBUG by default.

    Returns:
        logging.Logger: The configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = [RichHandler()]
    logger.propagate = False
    return logger


def set_log_level(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Apply the configured level to every logger created by get_logger.

    Parameters:
        level (str): Level name such as "DEBUG" or "INFO".
    """
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and any(
            isinstance(handler, RichHandler) for handler in logger.handlers
        ):
            logger.setLevel(level)
