"""Centralized logging configuration for the FFU standings engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = False,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure logging for the application.

    Engine modules log through children of the ``ffu`` logger, so this
    only needs to be called once by whatever drives the engine.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to log to file (default: False)
        log_to_console: Whether to log to console (default: True)

    Returns:
        Configured logger instance

    Example:
        from ffu.logging_config import setup_logging
        logger = setup_logging(level=logging.DEBUG)
        logger.info("Recomputing 2024 standings")
    """
    logger = logging.getLogger('ffu')
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    simple_formatter = logging.Formatter('%(levelname)s: %(message)s')

    if log_to_file:
        if log_dir is None:
            log_dir = Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'ffu_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = 'ffu') -> logging.Logger:
    """
    Get a logger instance.

    If setup_logging() hasn't been called, returns a basic logger.
    """
    return logging.getLogger(name)
