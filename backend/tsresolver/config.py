"""
Logging setup and environment configuration for the resolver.
"""

import os
import logging
import logging.handlers
from pathlib import Path

LOGGER_NAME = 'tsresolver'
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = None, log_file: str = None):
    """Attach console (and optionally rotating file) output to the package logger.

    Only the ``tsresolver`` logger is touched, so a host application's own
    logging setup is left alone. Calling this again replaces the handlers.

    Args:
        log_level: Level name; falls back to TSRESOLVER_LOG_LEVEL, then WARNING
        log_file: Also write to this file, rotated at 10MB with 5 backups
    """
    level = (log_level or os.environ.get('TSRESOLVER_LOG_LEVEL', 'WARNING')).upper()
    numeric_level = getattr(logging, level, logging.WARNING)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(numeric_level)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    package_logger.addHandler(_make_handler(logging.StreamHandler(), numeric_level, formatter))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        package_logger.addHandler(_make_handler(rotating, numeric_level, formatter))

    package_logger.debug(f"tsresolver logging at {level}" + (f", also to {log_file}" if log_file else ""))
    return package_logger


def get_config():
    """Get resolver configuration from environment variables."""
    return {
        'LOG_LEVEL': os.environ.get('TSRESOLVER_LOG_LEVEL', 'WARNING'),
        'LOG_FILE': os.environ.get('TSRESOLVER_LOG_FILE') or None,
        'CACHE_SIZE': int(os.environ.get('TSRESOLVER_CACHE_SIZE', '32')),
        'CWD': os.environ.get('TSRESOLVER_CWD') or None,
    }
