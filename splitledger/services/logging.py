"""Logging configuration for the command line front-end.

Output goes to a console stream (stdout by default) and, when a log file is given, to that file as well.
Level comes from the ``LOG_LEVEL`` env var unless passed explicitly.
Default: INFO. Engine modules log at DEBUG only.
"""

import logging
import os
import sys
from pathlib import Path
from typing import TextIO

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL env var and then INFO.

    Args:
        level_name: Explicit level name (case-insensitive), optional

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_logging(
    log_file: str | None = None,
    level_name: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure root logger for the CLI.

    Args:
        log_file: Path to log file, or None for stdout only
        level_name: Level name overriding LOG_LEVEL env var
        stream: Console stream (default: sys.stdout)

    Behavior:
        - Replaces existing root handlers to avoid duplicates
        - ISO format timestamps: [YYYY-MM-DD HH:MM:SS]
    """
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # Handler 1: console (stdout unless another stream is given)
    stdout_handler = logging.StreamHandler(stream or sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    # Handler 2: file, when requested
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
