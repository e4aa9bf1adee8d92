"""
Logging configuration for the Vendor TCO application.

Import this module (or call get_logger) to get the shared setup:
- console output for development
- vendor_tco.log: everything at the configured level, rotated
- calculations.log: records from app.services only, so TCO, sensitivity
  and ROI runs can be audited without request noise
- errors.log: ERROR and above from every logger
"""

import logging
import logging.handlers
import os
from typing import Optional

from app.config import LOG_DIR, LOG_LEVEL

DETAILED_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s'
SIMPLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'

# Loggers under this prefix also go to calculations.log
ENGINE_LOGGER_PREFIX = "app.services"


def _rotating_handler(path: str, level: int, max_mb: int, backups: int,
                      formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None):
    """
    Configure application-wide logging.

    Replaces any handlers already on the root logger, so calling it again
    (for example with a different level) reconfigures rather than duplicates.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files; defaults to LOG_DIR
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    app_log_file = os.path.join(log_dir, 'vendor_tco.log')
    calc_log_file = os.path.join(log_dir, 'calculations.log')
    error_log_file = os.path.join(log_dir, 'errors.log')

    detailed = logging.Formatter(fmt=DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    simple = logging.Formatter(fmt=SIMPLE_FORMAT, datefmt='%H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple)
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(app_log_file, log_level, 10, 5, detailed))
    root_logger.addHandler(_rotating_handler(error_log_file, logging.ERROR, 5, 3, detailed))

    calc_handler = _rotating_handler(calc_log_file, log_level, 10, 5, detailed)
    calc_handler.addFilter(logging.Filter(ENGINE_LOGGER_PREFIX))
    root_logger.addHandler(calc_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info(f"Logging configured at level: {level}")
    root_logger.info(f"Log files: {app_log_file}, {calc_log_file}, {error_log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Usually __name__ of the calling module
    """
    return logging.getLogger(name)


setup_logging(LOG_LEVEL)
