"""
Logging Configuration
Sets up the package logger for the command line and for embedding applications.
"""
import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configures the logger for the 'assetloader' namespace.

    Decoder diagnostics (record counts, skipped header regions, ignored OBJ
    statements) are emitted at DEBUG; loading progress at INFO; a texture that
    could not be paired with its mesh at WARNING.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        stream: Console stream for the log (stdout by default).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("assetloader")
    logger.setLevel(level)

    # Repeated setup (tests, embedding apps) must not duplicate output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
