"""Centralized logging configuration for the ytcomments application.

Sets up standard Python logging from the `logging.*` settings keys
(`logging.level`, `logging.format`, `logging.file`), with explicit
arguments taking precedence. Log records go to stderr so the rich
output on stdout stays readable; a file handler is added on request.
"""

import logging
import sys
from typing import Optional, Union

from ytcomments.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# Client libraries never log below WARNING unless the app itself does
NOISY_LOGGERS = ('googleapiclient', 'googleapiclient.discovery_cache', 'urllib3')


def resolve_log_level(level: Union[int, str, None]) -> int:
    """Turns 'debug', 'INFO', '10' or 20 into a logging level number.

    Unknown names fall back to WARNING.
    """
    if level is None:
        return DEFAULT_LOG_LEVEL
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else DEFAULT_LOG_LEVEL


def setup_logging(
    log_level: Optional[int] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> int:
    """Configures the root logger for the application.

    Args:
        log_level: Minimum level; defaults to the `logging.level` setting.
        log_format: Format string; defaults to the `logging.format` setting.
        log_file: Optional log file; defaults to the `logging.file` setting.

    Returns:
        The level that was applied.
    """
    level = log_level if log_level is not None else resolve_log_level(get_config('logging.level'))
    formatter = logging.Formatter(log_format or get_config('logging.format', DEFAULT_LOG_FORMAT))
    log_file = log_file or get_config('logging.file')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.debug(f"Logging configured. Level={logging.getLevelName(level)}")
    return level
