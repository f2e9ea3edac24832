"""JSON formatter producing one document per log record for log aggregation.

Every document starts with the same base fields, followed by the message, the
exception chain and the ambient context. Structured payloads (anything logged
that is not a string) are merged into the top level of the document instead of
being nested under ``message``.

Example:
    logger.info({"order_id": 42, "tags": ["checkout"]})

    {
        "timestamp": "2025-09-20T08:15:30.123+02:00",
        "level": "INFO",
        "hostName": "web-1",
        "process": "gunicorn",
        "threadName": "MainThread",
        "loggerName": "shop.orders",
        "tags": ["checkout"],
        "order_id": 42
    }
"""

import contextvars
import datetime
import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from logjson.config import FormatterSettings, ResolvedConfig
from logjson.document import (
    BaseFields,
    MergeEngine,
    build_exception_info,
    format_timestamp,
)
from logjson.document.exceptions import exception_from_record
from logjson.document.merge import safe_str
from logjson.document.message import (
    CompositePredicate,
    MessageKind,
    classify_message,
    type_name_predicate,
)
from logjson.logger.context import LogContext, flatten_context

logger = logging.getLogger(__name__)

Hook = Callable[[dict, logging.LogRecord | None], None]

_reporting = contextvars.ContextVar("logjson_reporting", default=False)


def _report(message: str, *args) -> None:
    # A formatter failure logged through a handler using this formatter must
    # not be reported a second time.
    if _reporting.get():
        return
    token = _reporting.set(True)
    try:
        logger.warning(message, *args)
    finally:
        _reporting.reset(token)


class JsonFormatter(logging.Formatter):
    """Format log records as JSON documents ready for a log aggregation service.

    Settings come from ``settings`` when given, otherwise they are resolved
    from ``config_dir`` (YAML), the environment and defaults, with
    ``config_overrides`` applied on top.

    Args:
        settings: Fully resolved settings
        config_dir: Directory holding ``config.yml``/``config.yaml``
        hooks: Callables ``hook(document, record)`` that add deployment
            specific fields to every document
        composite_predicate: Decides whether a non-string payload is a
            pre-rendered message wrapper. Defaults to a class-name check
            against ``settings.composite_message_types``.
    """

    def __init__(
        self,
        settings: FormatterSettings | None = None,
        *,
        config_dir: Path | str | None = None,
        hooks: Iterable[Hook] | None = None,
        composite_predicate: CompositePredicate | None = None,
        **config_overrides,
    ):
        super().__init__()
        self.settings = (
            settings or ResolvedConfig(config_dir, **config_overrides).get()
        )
        self.fields = BaseFields(
            hostname=self.settings.hostname,
            process_name=self.settings.process_name,
            utc=self.settings.utc_timestamps,
        )
        self.merge_engine = MergeEngine(
            array_merge=self.settings.array_merge,
            ignore_null=self.settings.ignore_null_on_merge,
        )
        self.hooks: list[Hook] = list(hooks or [])
        self.is_composite = composite_predicate or type_name_predicate(
            self.settings.composite_message_types
        )

    def append_additional_fields(
        self, document: dict, record: logging.LogRecord | None
    ) -> None:
        """Add deployment specific fields. Subclasses override this."""

    def add_hook(self, hook: Hook) -> None:
        self.hooks.append(hook)

    def _extend(self, document: dict, record: logging.LogRecord | None) -> None:
        for hook in [self.append_additional_fields, *self.hooks]:
            try:
                hook(document, record)
            except Exception as e:  # noqa: BLE001 - hooks are user code
                _report("Formatter hook %r failed: %s", hook, e)

    def build_document(
        self, record: logging.LogRecord, context: Mapping | None = None
    ) -> tuple[dict, MessageKind, Any]:
        """Assemble the base document for a record.

        Returns:
            tuple containing the document, how the payload was classified and
            the structured payload still to be merged (None if there is none)
        """
        document = self.fields.extract(record)
        self._extend(document, record)

        kind, message, payload = classify_message(record, self.is_composite)
        if message != "":
            document["message"] = message

        exception_info = build_exception_info(
            exception_from_record(record), self.settings.inner_exception_depth
        )
        if exception_info is not None:
            document["exception"] = exception_info

        ambient = LogContext.snapshot() if context is None else context
        document.update(flatten_context(ambient, getattr(record, "context", None)))
        return document, kind, payload

    def _fallback_timestamp(self, record: logging.LogRecord) -> str | None:
        try:
            return format_timestamp(getattr(record, "created", 0.0), self.fields.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    def _minimal_document(self, record: logging.LogRecord) -> str:
        document = {
            "timestamp": self._fallback_timestamp(record),
            "level": getattr(record, "levelname", None),
            "hostName": self.fields.hostname,
            "process": self.fields.process_name,
            "threadName": getattr(record, "threadName", None),
            "loggerName": getattr(record, "name", None),
            "message": safe_str(getattr(record, "msg", None)),
        }
        return self.merge_engine.serialize(document)

    def format_one(
        self, record: logging.LogRecord, context: Mapping | None = None
    ) -> str:
        """Format a single record as a JSON document.

        Args:
            record: The log record to format
            context: Context snapshot to use instead of the ambient
                ``LogContext``

        Returns:
            A JSON object string. This never raises.
        """
        try:
            document, kind, payload = self.build_document(record, context)
            if kind is MessageKind.STRUCTURED:
                return self.merge_engine.render(document, payload)
            return self.merge_engine.render(document)
        except Exception as e:  # noqa: BLE001 - formatting must not break logging
            _report(
                "Unable to format record from %s: %s", getattr(record, "name", None), e
            )
            return self._minimal_document(record)

    def format(self, record: logging.LogRecord) -> str:
        return self.format_one(record)

    def format_many(
        self, records: Iterable[logging.LogRecord], context: Mapping | None = None
    ) -> str:
        """Format records into a JSON array, one document per record, in order."""
        return "[" + ",".join(self.format_one(r, context) for r in records) + "]"

    def format_rendered(
        self,
        text: str,
        timestamp: float | datetime.datetime | None = None,
    ) -> str:
        """Format an already rendered log line.

        If ``text`` is a JSON object it is merged into the document, otherwise
        it becomes the ``message`` field.
        """
        if timestamp is None:
            timestamp = datetime.datetime.now().astimezone()
        try:
            document = self.fields.identity(timestamp)
            self._extend(document, None)
            return self.merge_engine.render(document, text)
        except Exception as e:  # noqa: BLE001 - formatting must not break logging
            _report("Unable to format rendered line: %s", e)
            return self.merge_engine.serialize(
                {
                    "hostName": self.fields.hostname,
                    "process": self.fields.process_name,
                    "message": safe_str(text),
                }
            )
