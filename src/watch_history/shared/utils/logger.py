"""
Centralized logging configuration for the pipeline.

The shared ``logger`` is configured from the environment:
``LOG_LEVEL`` (default INFO), ``LOG_FILE`` (optional file handler) and
``LOG_STREAM`` (``false`` turns the stdout handler off, e.g. inside a
worker whose parent already prints progress).
"""

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

FALSE_VALUES = ("0", "false", "no", "off")


def env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in FALSE_VALUES


def setup_logger(
    name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    stream: bool = True,
) -> logging.Logger:
    """
    Configure a pipeline logger, replacing any handlers it already has.

    Args:
        name: Logger name, ``watch_history`` or one of its children
        level: Level number or name such as "DEBUG"
        log_file: Also write to this file when given
        stream: Write to stdout

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    pipeline_logger = logging.getLogger(name)
    pipeline_logger.setLevel(level)
    pipeline_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = []
    if stream:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        pipeline_logger.addHandler(handler)

    return pipeline_logger


logger = setup_logger(
    "watch_history",
    level=os.getenv("LOG_LEVEL", "INFO"),
    log_file=os.getenv("LOG_FILE"),
    stream=env_flag("LOG_STREAM"),
)
