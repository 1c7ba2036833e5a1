"""
Logging setup and configuration utilities.

This module provides centralized logging configuration using loguru with
console and rotating file sinks. Modules keep using ``logging.getLogger``;
their records are routed into loguru by ``InterceptHandler``.
"""

import logging
import sys
from pathlib import Path
from types import FrameType
from typing import Optional

from loguru import logger as loguru_logger

from ..config.models import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: object = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame: Optional[FrameType] = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup application logging with the given configuration.

    Args:
        config: Logging configuration
    """
    loguru_logger.remove()

    if config.console_enabled:
        loguru_logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=config.level,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    if config.file_enabled:
        log_dir = Path(config.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        loguru_logger.add(
            log_dir / "app.log",
            format=FILE_FORMAT,
            level=config.level,
            rotation=config.max_file_size,
            retention=config.backup_count,
            compression="zip",
            backtrace=True,
            diagnose=False
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        named = logging.getLogger(name)
        named.handlers = [InterceptHandler()]
        named.propagate = False
