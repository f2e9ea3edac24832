import logging
import sys

from logjson.config import FormatterSettings, ResolvedConfig
from logjson.logger.context import ContextStack, LogContext, ScopedContextStack
from logjson.logger.handler import FileHandler, Formatter, Handler, StreamHandler
from logjson.logger.json_formatter import JsonFormatter

__all__ = [
    "ContextStack",
    "FileHandler",
    "Formatter",
    "Handler",
    "JsonFormatter",
    "LogContext",
    "ScopedContextStack",
    "StreamHandler",
    "get_logger",
]


def get_logger(
    name: str,
    handlers: list[Handler] | None = None,
    log_level: int | str | None = None,
    settings: FormatterSettings | None = None,
) -> logging.Logger:
    """Get or create a logger that writes JSON documents.

    Returns existing logger if already configured, otherwise attaches the
    provided handlers (stdout by default). Handlers without a formatter share
    one ``JsonFormatter`` built from ``settings``.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    settings = settings or ResolvedConfig(log_level=log_level).get()
    if not handlers:
        handlers = [Handler(handler=StreamHandler(sys.stdout))]

    default_formatter = None
    for h in handlers:
        formatter = h.formatter
        if formatter is None:
            default_formatter = default_formatter or JsonFormatter(settings)
            formatter = default_formatter
        h.handler.setFormatter(formatter)
        logger.addHandler(h.handler)

    logger.setLevel(settings.log_level if log_level is None else _level(log_level))
    logger.propagate = False

    return logger


def _level(log_level: int | str) -> int:
    if isinstance(log_level, int):
        return log_level
    return logging.getLevelName(log_level.upper())
