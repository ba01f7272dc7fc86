"""Log sinks for pagehound crawl records."""

from pagehound.sinks.base import LogSink
from pagehound.sinks.factory import LOG_SINK_TYPES, create_log_sink
from pagehound.sinks.sqlite_sink import SqliteLogSink
from pagehound.sinks.structlog_sink import StructlogSink
from pagehound.sinks.xml_sink import XmlLogSink

__all__ = [
    "LOG_SINK_TYPES",
    "LogSink",
    "SqliteLogSink",
    "StructlogSink",
    "XmlLogSink",
    "create_log_sink",
]
