"""Logging setup for the recurring_recon package and its command-line tool."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "recurring_recon"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Attach handlers to the package logger.

    The console shows ``level`` and above. A log file, when given, always
    receives DEBUG records so projection and matching decisions can be
    traced after a run.

    Args:
        level: Console logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Optional path to a rotating log file
        log_format: Optional console format string

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Replace handlers from any earlier call
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def level_from_name(name: str) -> int:
    """Translate a configured level name such as "debug" into a logging level."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def logging_from_config(settings, verbose: bool = False) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of a ReconConfig.

    Args:
        settings: LoggingConfig with ``level``, ``format`` and ``file``
        verbose: Force DEBUG on the console, as the CLI's ``-v`` flag does
    """
    level = logging.DEBUG if verbose else level_from_name(settings.level)
    log_file = Path(settings.file) if settings.file else None
    return setup_logging(level, log_file=log_file, log_format=settings.format)
