"""Base fields shared by every JSON document.

The host and process identity are read once when a formatter is built and
reused for every record afterwards.
"""

import datetime
import logging
import socket
import sys
from pathlib import Path


def format_timestamp(value: float | datetime.datetime, utc: bool = False) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.fff+HH:MM``.

    Args:
        value: Epoch seconds or a datetime. Naive datetimes are local time.
        utc: Render with a ``+00:00`` offset instead of the local one.

    Returns:
        ISO 8601 string with millisecond precision and a numeric offset
    """
    if isinstance(value, datetime.datetime):
        moment = value if value.tzinfo is not None else value.astimezone()
    else:
        moment = datetime.datetime.fromtimestamp(value).astimezone()
    if utc:
        moment = moment.astimezone(datetime.UTC)
    return moment.isoformat(timespec="milliseconds")


def current_process_name() -> str:
    script = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else ""
    return script or Path(sys.executable).name or "python"


class BaseFields:
    """Extract the scalar base fields of a record."""

    def __init__(
        self,
        hostname: str | None = None,
        process_name: str | None = None,
        utc: bool = False,
    ):
        self.hostname = hostname or socket.gethostname()
        self.process_name = process_name or current_process_name()
        self.utc = utc

    def identity(self, timestamp: float | datetime.datetime) -> dict:
        return {
            "timestamp": format_timestamp(timestamp, self.utc),
            "hostName": self.hostname,
            "process": self.process_name,
        }

    def extract(self, record: logging.LogRecord) -> dict:
        return {
            "timestamp": format_timestamp(record.created, self.utc),
            "level": record.levelname,
            "hostName": self.hostname,
            "process": self.process_name,
            "threadName": getattr(record, "threadName", None),
            "loggerName": record.name,
        }
