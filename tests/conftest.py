from __future__ import annotations

import logging

import pytest

from logjson import FormatterSettings, JsonFormatter, LogContext

ENV_VARS = [
    "LOGJSON_ARRAY_MERGE",
    "LOGJSON_IGNORE_NULL",
    "LOGJSON_INNER_DEPTH",
    "LOGJSON_UTC",
    "LOGJSON_HOSTNAME",
    "LOGJSON_PROCESS_NAME",
    "LOGJSON_COMPOSITE_TYPES",
    "LOGJSON_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def settings() -> FormatterSettings:
    return FormatterSettings(hostname="test-host", process_name="test-proc")


@pytest.fixture
def formatter(settings: FormatterSettings) -> JsonFormatter:
    return JsonFormatter(settings)


@pytest.fixture
def make_record():
    def _make(
        msg=None,
        args=(),
        *,
        level=logging.INFO,
        name="tests.app",
        exc_info=None,
        created=None,
        **extra,
    ) -> logging.LogRecord:
        record = logging.LogRecord(name, level, __file__, 10, msg, args, exc_info)
        if created is not None:
            record.created = created
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    return _make
