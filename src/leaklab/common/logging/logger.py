#  Copyright (c) 2024 Astramind. Licensed under Apache License, Version 2.0.

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init as colorama_init

colorama_init()

_LOGGERS = {}
_DEFAULT_LEVEL = logging.INFO


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name and the message by severity."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        record.msg = f"{color}{record.msg}{Style.RESET_ALL}"
        return super().format(record)


def _logger_name(name: Union[str, Path]) -> str:
    # callers pass either __name__ or __file__
    name = str(name)
    if name.endswith('.py'):
        return f"leaklab.{Path(name).stem}"
    return name


def setup_logger(name: Union[str, Path], level: Optional[int] = None) -> logging.Logger:
    """Return a colored stream logger for ``name``.

    Args:
        name: Module ``__name__`` or ``__file__``.
        level: Optional level; defaults to the process-wide leaklab level.

    Returns:
        logging.Logger: A configured, non-propagating logger. Calling this twice
            with the same name returns the same logger without duplicating handlers.
    """
    logger_name = _logger_name(name)
    if logger_name in _LOGGERS:
        logger = _LOGGERS[logger_name]
        if level is not None:
            logger.setLevel(level)
        return logger

    logger = logging.getLogger(logger_name)
    logger.setLevel(level if level is not None else _DEFAULT_LEVEL)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter(
            fmt='%(asctime)s.%(msecs)03d %(name)s %(levelname)s: %(message)s',
            datefmt='%H:%M:%S',
        ))
        logger.addHandler(handler)

    _LOGGERS[logger_name] = logger
    return logger


def set_logging_level(level: Union[int, str]) -> None:
    """Set the level of every logger created through ``setup_logger``."""
    global _DEFAULT_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {level}")
    _DEFAULT_LEVEL = level
    for logger in _LOGGERS.values():
        logger.setLevel(level)
