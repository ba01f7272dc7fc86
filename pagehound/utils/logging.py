"""
Structured logging for pagehound.

Provides JSON-formatted logging with context propagation. This is the
diagnostic channel (crawl progress, transport failures); the per-page crawl
records go to a LogSink instead.
"""

import logging
import sys
from typing import Any, TextIO

import structlog


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging for the crawler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_type: Output format ('json' or 'console').
        stream: Stream to write to. Defaults to stderr so diagnostics never
            interleave with an XML crawl log written to stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        stream=stream or sys.stderr,
        format="%(message)s",
        force=True,
    )

    # Keep httpx request chatter out of crawl diagnostics
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structured logger.
    """
    return structlog.get_logger(name)


class CrawlerLogger:
    """
    Specialized logger for crawl operations with pre-defined event types.
    """

    def __init__(self, name: str = "pagehound"):
        self._logger = get_logger(name)
        self._context: dict[str, Any] = {}

    def bind(self, **kwargs: Any) -> "CrawlerLogger":
        """Bind context to all subsequent log calls."""
        new_logger = CrawlerLogger.__new__(CrawlerLogger)
        new_logger._logger = self._logger.bind(**kwargs)
        new_logger._context = {**self._context, **kwargs}
        return new_logger

    def crawl_start(self, seed_url: str, lifo: bool, handlers: list[str], **kwargs: Any) -> None:
        """Log the start of a crawl."""
        self._logger.info(
            "crawl_start",
            event_type="crawl",
            seed_url=seed_url,
            lifo=lifo,
            handlers=handlers,
            **kwargs,
        )

    def crawl_finished(self, requests: int, pending: int, stopped: bool, **kwargs: Any) -> None:
        """Log the end of a crawl."""
        self._logger.info(
            "crawl_finished",
            event_type="crawl",
            requests=requests,
            pending=pending,
            stopped=stopped,
            **kwargs,
        )

    def page_fetched(
        self,
        url: str,
        status_code: int,
        duration_ms: float,
        content_length: int,
        **kwargs: Any,
    ) -> None:
        """Log a completed HTTP exchange."""
        self._logger.debug(
            "page_fetched",
            event_type="fetch",
            url=url,
            status_code=status_code,
            duration_ms=duration_ms,
            content_length=content_length,
            **kwargs,
        )

    def fetch_error(
        self,
        url: str,
        method: str,
        error: str,
        referrer: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Report a failed request on the error channel."""
        self._logger.error(
            "fetch_error",
            event_type="fetch",
            url=url,
            method=method,
            error=error,
            referrer=referrer,
            **kwargs,
        )

    def link_enqueued(self, url: str, referrer: str, **kwargs: Any) -> None:
        """Log a newly discovered URL."""
        self._logger.debug(
            "link_enqueued",
            event_type="frontier",
            url=url,
            referrer=referrer,
            **kwargs,
        )

    def link_rejected(self, link: str, reason: str, **kwargs: Any) -> None:
        """Log a link dropped by filtering."""
        self._logger.debug(
            "link_rejected",
            event_type="frontier",
            link=link,
            reason=reason,
            **kwargs,
        )

    def handler_skipped(self, handler: str, url: str, reason: str, **kwargs: Any) -> None:
        """Log a handler whose applicability filter did not match."""
        self._logger.debug(
            "handler_skipped",
            event_type="handler",
            handler=handler,
            url=url,
            reason=reason,
            **kwargs,
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(message, **kwargs)
