"""
Logging configuration utilities.

macdiskutil is a library, so nothing here runs on import. Applications that
want its messages on stderr call setup_logging() once at startup.
"""
import logging
from typing import Optional, TextIO

LOGGER_NAME = 'macdiskutil'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(debug: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the macdiskutil logger.

    Only the package logger is touched; the root logger and its handlers are
    left to the application. Calling this again replaces the handler installed
    by the previous call instead of adding a second one.

    Args:
        debug: Whether to enable debug logging
        stream: Stream the handler writes to (defaults to stderr)

    Returns:
        The configured logger
    """
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, '_macdiskutil', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._macdiskutil = True
    logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger
