"""
Logging configuration for the keyword harvester.

Usage:
    from act_harvester.logging_config import setup_logging

    logger = setup_logging(__name__)
    logger.info("Classified search term")
    logger.warning("Oracle fallback used")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_LEVEL = "INFO"

_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    module_name: str,
    log_level: str = DEFAULT_LOG_LEVEL,
    log_dir: str = "logs",
    console_output: bool = True,
    file_output: bool = True,
) -> logging.Logger:
    """
    Set up logging for a module with file and console output.

    Args:
        module_name: Name of the module (use __name__)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (default: logs/)
        console_output: Whether to output to console (default: True)
        file_output: Whether to write logs/{module}_{date}.log (default: True)

    Returns:
        Configured logger instance

    Log Files:
        Format: logs/{module}_{date}.log
        Example: logs/engine_2026-10-19.log
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Prevent duplicate handlers if setup_logging called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    if file_output:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        today = datetime.now().strftime("%Y-%m-%d")
        simple_module = module_name.split(".")[-1]
        log_file = log_path / f"{simple_module}_{today}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def set_level(log_level: str) -> None:
    """Apply a log level to every harvester logger configured so far."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("act_harvester"):
            logging.getLogger(name).setLevel(level)
