"""
Custom logging configuration.

Responsibilities:
- Setup the package logger
- Configure log levels and formats
- Output logs to console and, optionally, a file
"""

import logging
from typing import Optional

from cartouche.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    name: str = "cartouche",
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """Configures the application logger."""
    log = logging.getLogger(name)
    log.setLevel(level or settings.LOG_LEVEL)

    # Handlers are installed once, even if setup runs again
    if not log.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console = logging.StreamHandler()
        console.setFormatter(formatter)
        log.addHandler(console)

        log_file = log_file or settings.LOG_FILE
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            log.addHandler(file_handler)

    return log


logger = setup_logger()
