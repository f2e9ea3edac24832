from logjson.document.exceptions import build_exception_info
from logjson.document.fields import BaseFields, format_timestamp
from logjson.document.merge import MergeEngine
from logjson.document.message import MessageKind, classify_message

__all__ = [
    "BaseFields",
    "MergeEngine",
    "MessageKind",
    "build_exception_info",
    "classify_message",
    "format_timestamp",
]
