"""Serialize documents and merge structured payloads into them.

A payload that parses to a JSON object is deep-merged into the base document:
the payload wins on scalar conflicts, nested objects are merged key by key and
arrays present on both sides are combined according to ``ArrayMergeHandling``.
Anything that cannot be parsed or merged ends up in the ``message`` field as
text. Nothing in this module raises to the caller of ``MergeEngine.render``.
"""

import dataclasses
import logging
import types
from collections import deque
from collections.abc import Mapping
from enum import Enum
from typing import Any

import orjson
from pydantic import BaseModel

from logjson.config.data_model import ArrayMergeHandling

logger = logging.getLogger(__name__)

_CYCLE = object()
_NO_PAYLOAD = object()

_INT64_MIN = -(2**63)
_UINT64_MAX = 2**64 - 1

_SERIALIZATION_ERRORS = (
    orjson.JSONEncodeError,
    TypeError,
    ValueError,
    RecursionError,
)


def clean_str(value: str) -> str:
    """Return ``value`` as valid UTF-8, replacing lone surrogates."""
    try:
        value.encode("utf-8")
        return value
    except UnicodeEncodeError:
        return value.encode("utf-8", "surrogatepass").decode("utf-8", "replace")


def _object_fields(value: Any) -> dict | None:
    if isinstance(value, (type, types.ModuleType, BaseException)) or callable(value):
        return None
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict):
        return {k: v for k, v in attrs.items() if not k.startswith("_")}
    return None


def to_json_ready(value: Any, _ancestors: set | None = None) -> Any:
    """Convert ``value`` into something orjson can serialize.

    Containers on the current path are tracked by identity; a reference back to
    one of them is a cycle and is dropped. The same object reached twice along
    different paths is rendered both times.
    """
    if isinstance(value, str):
        return clean_str(value)
    if value is None or isinstance(value, (bool, float)):
        return value
    if isinstance(value, int):
        if _INT64_MIN <= value <= _UINT64_MAX:
            return value
        return str(value)

    ancestors = _ancestors if _ancestors is not None else set()
    if id(value) in ancestors:
        return _CYCLE

    if isinstance(value, Enum):
        return to_json_ready(value.value, ancestors)
    if isinstance(value, BaseModel):
        return to_json_ready(value.model_dump(mode="json"), ancestors)

    # logjson.logger imports this module
    from logjson.logger.context import ContextStack

    if isinstance(value, ContextStack):
        return [clean_str(item) for item in value.snapshot()]

    ancestors.add(id(value))
    try:
        if isinstance(value, Mapping):
            out = {}
            for k, v in value.items():
                item = to_json_ready(v, ancestors)
                if item is not _CYCLE:
                    out[clean_str(k if isinstance(k, str) else safe_str(k))] = item
            return out
        if isinstance(value, (list, tuple, set, frozenset, deque)):
            return [
                item
                for item in (to_json_ready(v, ancestors) for v in value)
                if item is not _CYCLE
            ]
        fields = _object_fields(value)
        if fields is not None:
            return to_json_ready(fields, ancestors)
        return value
    finally:
        ancestors.discard(id(value))


def _default(value: Any) -> str:
    return clean_str(safe_str(value))


def dumps(value: Any) -> str:
    return orjson.dumps(to_json_ready(value), default=_default).decode("utf-8")


def _scalar_or_str(value: Any) -> Any:
    if value is None or isinstance(value, (bool, float)):
        return value
    if isinstance(value, int) and _INT64_MIN <= value <= _UINT64_MAX:
        return value
    return _default(value)


def _stringify_fields(document: dict) -> dict:
    return {
        clean_str(safe_str(k)): _scalar_or_str(v)
        for k, v in document.items()
    }


class MergeEngine:
    def __init__(
        self,
        array_merge: ArrayMergeHandling = ArrayMergeHandling.CONCAT,
        ignore_null: bool = True,
    ):
        self.array_merge = ArrayMergeHandling(array_merge)
        self.ignore_null = ignore_null

    def _merge_arrays(self, existing: list, incoming: list) -> list:
        if self.array_merge is ArrayMergeHandling.UNION:
            merged = list(existing)
            for item in incoming:
                if item not in merged:
                    merged.append(item)
            return merged
        return existing + incoming

    def merge(self, target: dict, source: dict) -> dict:
        """Deep-merge ``source`` into ``target`` in place and return it."""
        for key, value in source.items():
            if key not in target:
                target[key] = value
                continue
            existing = target[key]
            if isinstance(existing, dict) and isinstance(value, dict):
                self.merge(existing, value)
            elif isinstance(existing, list) and isinstance(value, list):
                target[key] = self._merge_arrays(existing, value)
            elif value is None and self.ignore_null:
                continue
            else:
                target[key] = value
        return target

    @staticmethod
    def parse(payload: Any) -> tuple[Any, str | None]:
        """Parse a payload into a JSON value.

        Returns:
            tuple of (parsed value or None, JSON text of a structured payload).
            The parsed value is None when the payload is not valid JSON.
        """
        if isinstance(payload, (bytes, bytearray)):
            payload = bytes(payload).decode("utf-8", "replace")
        if isinstance(payload, str):
            try:
                return orjson.loads(clean_str(payload)), None
            except orjson.JSONDecodeError:
                return None, None
        try:
            text = dumps(payload)
            return orjson.loads(text), text
        except _SERIALIZATION_ERRORS as e:
            logger.debug(
                "Payload of type %s is not serializable: %s",
                type(payload).__name__,
                e,
            )
            return None, None

    def serialize(self, document: dict) -> str:
        try:
            return dumps(document)
        except _SERIALIZATION_ERRORS as e:
            logger.debug("Degrading document fields to strings: %s", e)
            blob = orjson.dumps(_stringify_fields(document), default=_default)
            return blob.decode("utf-8")

    def render(self, document: dict, payload: Any = _NO_PAYLOAD) -> str:
        """Serialize ``document`` with ``payload`` merged into it.

        When the payload is not a JSON object it is stored under ``message``
        instead: the raw text for strings, the JSON text (or ``str()``) for
        other objects.
        """
        if payload is _NO_PAYLOAD:
            return self.serialize(document)

        parsed, text = self.parse(payload)
        if isinstance(parsed, dict):
            try:
                base = orjson.loads(self.serialize(document))
                return dumps(self.merge(base, parsed))
            except _SERIALIZATION_ERRORS as e:
                logger.debug("Merge failed, keeping payload as message: %s", e)

        if text is not None:
            fallback = text
        elif isinstance(payload, (bytes, bytearray)):
            fallback = bytes(payload).decode("utf-8", "replace")
        else:
            fallback = payload if isinstance(payload, str) else safe_str(payload)
        return self.serialize({**document, "message": fallback})


def safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - arbitrary __str__ implementations
        return f"<unprintable {type(value).__name__}>"
