"""Decide whether a record's payload is text or a structured object."""

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

NULL_MESSAGE = "null"

CompositePredicate = Callable[[Any], bool]


class MessageKind(str, Enum):
    PLAIN = "plain"
    RENDERED = "rendered"
    STRUCTURED = "structured"


def type_name_predicate(type_names: Iterable[str]) -> CompositePredicate:
    """Build a predicate matching payloads whose class name is in ``type_names``.

    Both the bare class name and the ``module.QualName`` form are accepted,
    so ``BraceMessage`` and ``myapp.logs.BraceMessage`` both work.
    """
    names = frozenset(type_names)

    def is_composite(payload: Any) -> bool:
        cls = type(payload)
        return (
            cls.__name__ in names or f"{cls.__module__}.{cls.__qualname__}" in names
        )

    return is_composite


def _render(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except (TypeError, ValueError, KeyError, IndexError) as e:
        logger.debug("Unable to apply format arguments: %s", e)
        return str(record.msg)


def classify_message(
    record: logging.LogRecord, is_composite: CompositePredicate | None = None
) -> tuple[MessageKind, str, Any]:
    """Split a record's payload into a message string and a structured payload.

    Returns:
        tuple containing:
        - kind (MessageKind): how the payload was classified
        - message (str): text for the ``message`` field, empty when structured
        - payload (Any): the object to merge, None unless structured
    """
    payload = record.msg
    if payload is None:
        return MessageKind.PLAIN, NULL_MESSAGE, None

    if isinstance(payload, str):
        kind = MessageKind.RENDERED if record.args else MessageKind.PLAIN
        return kind, _render(record), None

    if isinstance(payload, (bytes, bytearray)):
        return MessageKind.PLAIN, bytes(payload).decode("utf-8", "replace"), None

    # positional arguments mean the caller asked for %-style rendering
    if record.args or (is_composite is not None and is_composite(payload)):
        return MessageKind.RENDERED, _render(record), None

    return MessageKind.STRUCTURED, "", payload
