"""Logging setup for the Ezra E2E suite."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"

ROOT_LOGGER = "EzraE2E"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the suite logger with a console handler and an optional file handler.

    Safe to call more than once; existing handlers on the suite logger are replaced.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        log_file: Path of a UTF-8 log file, or None for console only

    Returns:
        The configured ``EzraE2E`` logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Quiet third-party loggers at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the suite namespace, e.g. ``get_logger("Timezone")``"""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
