"""
Logging setup shared by the seller tools.

Every message carries the thread name so concurrent orders can be told apart:

    2026-10-18 10:15:30 [INFO    ] [order-250901T35] seller.offer - offer accepted

Library modules only call get_logger(__name__); the entry point calls
setup_logging() once.
"""
import logging
import sys
from typing import Optional, Union

APP_LOGGER = "buff_seller"
LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(threadName)s] %(short_name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ShortNameFilter(logging.Filter):
    ''' Drops the application prefix so records show "seller.offer" instead of "buff_seller.seller.offer" '''

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        prefix = APP_LOGGER + "."
        record.short_name = name[len(prefix):] if name.startswith(prefix) else name
        return True


def setup_logging(level: Union[int, str] = logging.INFO,
                  stream=None) -> logging.Logger:
    '''
    Configure the application logger with a single console handler.
    Calling it again replaces the previous handler, so tests and the CLI can
    re-run it safely.
        Input:
            - level: logging level or its name ("DEBUG", "INFO", ...)
            - stream: output stream (default stderr, keeping stdout for results)
        Output: the configured application logger
    '''
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(ShortNameFilter())
    logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    ''' Child logger of the application logger, e.g. get_logger(__name__) '''
    if not name:
        return logging.getLogger(APP_LOGGER)
    return logging.getLogger(f"{APP_LOGGER}.{name}")
