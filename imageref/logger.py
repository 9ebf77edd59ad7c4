import logging
import sys

from imageref.log_levels import LogLevel, coerce_log_level

logger = logging.getLogger("imageref")
logger.addHandler(logging.NullHandler())


def configure_logger(level: LogLevel | str | int = LogLevel.WARNING, stream=None) -> logging.Logger:
    """Send imageref log records to ``stream`` (stderr by default) at ``level``."""
    resolved_level = coerce_log_level(level)
    lvl_value = int(resolved_level)

    logger.setLevel(lvl_value)
    logger.propagate = False

    fmt = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt, datefmt)

    stream_handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
    if not stream_handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        logger.addHandler(handler)
        stream_handlers = [handler]
    elif stream is not None:
        for handler in stream_handlers:
            handler.setStream(stream)

    for handler in stream_handlers:
        handler.setLevel(lvl_value)
        handler.setFormatter(formatter)
    return logger
