from logjson.config import ArrayMergeHandling, FormatterSettings, ResolvedConfig
from logjson.document import MessageKind
from logjson.logger import (
    ContextStack,
    Handler,
    JsonFormatter,
    LogContext,
    get_logger,
)

__all__ = [
    "ArrayMergeHandling",
    "ContextStack",
    "FormatterSettings",
    "Handler",
    "JsonFormatter",
    "LogContext",
    "MessageKind",
    "ResolvedConfig",
    "get_logger",
]
