import logging
from enum import IntEnum
from typing import Union


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def coerce_log_level(level: Union["LogLevel", str, int]) -> LogLevel:
    """Accept a LogLevel, a level name in any case, or a numeric level."""
    if isinstance(level, LogLevel):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return coerce_log_level(int(name))
        try:
            return LogLevel[name]
        except KeyError as exc:
            raise ValueError(f"Unsupported log level: {level}") from exc
    if isinstance(level, int):
        try:
            return LogLevel(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level value: {level}") from exc
    raise TypeError(f"Cannot coerce {level!r} to LogLevel")
