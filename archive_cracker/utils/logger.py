"""
Logging utilities for the Archive Password Cracker.
"""

import logging
import os
import sys
from typing import Optional


LOGGER_NAME = "archive_cracker"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class Logger:
    """Configures the named logger shared by every cracker component"""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    def __init__(self, name: str = LOGGER_NAME, log_file: Optional[str] = None,
                 level: int = logging.INFO, console: bool = True):
        """Initialize the logger

        Args:
            name: Logger name
            log_file: Optional file to log to
            level: Logging level
            console: Whether to log to stdout
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Reconfiguring replaces whatever an earlier instance installed
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        if console:
            self._add_handler(logging.StreamHandler(sys.stdout), level, formatter)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            self._add_handler(logging.FileHandler(log_file), level, formatter)

    def _add_handler(self, handler: logging.Handler, level: int,
                     formatter: logging.Formatter) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    def get_logger(self) -> logging.Logger:
        """Get the logger instance"""
        return self.logger


def get_default_logger() -> logging.Logger:
    """Return the package logger, configuring it on first use"""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        logger = Logger().get_logger()
    return logger
