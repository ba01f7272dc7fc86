"""
Factory for creating log sinks from configuration.

Lets crawl files and the CLI choose a log sink by type name at runtime.
"""

from collections.abc import Mapping
from typing import Any

from pagehound.exceptions import UnsupportedTypeError
from pagehound.sinks.base import LogSink
from pagehound.sinks.sqlite_sink import SqliteLogSink
from pagehound.sinks.structlog_sink import StructlogSink
from pagehound.sinks.xml_sink import XmlLogSink
from pagehound.utils.logging import CrawlerLogger
from pagehound.utils.options import as_bool, normalize_options

LOG_SINK_TYPES = ("xml", "sqlite", "structlog")


def create_log_sink(
    type_name: str,
    options: Mapping[str, Any] | None = None,
    logger: CrawlerLogger | None = None,
) -> LogSink:
    """
    Create a log sink by type name.

    Args:
        type_name: One of "xml", "sqlite" or "structlog" (case-insensitive).
        options: Sink options. xml takes target, append and indent; sqlite
            takes dbfile and append; structlog takes none.
        logger: Logger instance.

    Returns:
        The configured log sink.

    Raises:
        UnsupportedTypeError: If the type is unknown.
        ConfigurationError: If an option is unknown or invalid.

    Example:
        ```python
        sink = create_log_sink("sqlite", {"dbfile": "crawl.sq3", "append": "true"})
        ```
    """
    logger = logger or CrawlerLogger("log_sink_factory")
    kind = str(type_name).lower()

    if kind == "xml":
        opts = normalize_options(options, ("target", "file", "append", "indent"), "xml log sink")
        target = opts.get("target", opts.get("file", "-"))
        logger.info("Creating XML log sink", target=target)
        return XmlLogSink(
            target=str(target),
            append=as_bool(opts.get("append", False), "append"),
            indent=str(opts.get("indent", "  ")),
        )

    elif kind == "sqlite":
        opts = normalize_options(options, ("dbfile", "append"), "sqlite log sink")
        logger.info("Creating SQLite log sink", dbfile=opts.get("dbfile"))
        return SqliteLogSink(
            dbfile=opts.get("dbfile"),
            append=as_bool(opts.get("append", False), "append"),
        )

    elif kind == "structlog":
        normalize_options(options, (), "structlog log sink")
        logger.info("Creating structlog log sink")
        return StructlogSink()

    else:
        raise UnsupportedTypeError("log sink", str(type_name))
