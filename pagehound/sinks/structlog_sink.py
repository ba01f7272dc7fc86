"""
Structlog log sink.

Forwards the crawl record to the diagnostic logger, one event per record,
with a per-page sequence number bound so records can be grouped again.
"""

from collections.abc import Mapping
from typing import Any

from pagehound.models import Request, Response
from pagehound.sinks.base import LogSink
from pagehound.utils.logging import CrawlerLogger


class StructlogSink(LogSink):
    """Log sink emitting structlog events."""

    def __init__(self, logger: CrawlerLogger | None = None):
        self._base_logger = logger or CrawlerLogger("pagehound.crawllog")
        self._logger = self._base_logger
        self._page = 0

    def start_page(self) -> None:
        self._page += 1
        self._logger = self._base_logger.bind(page=self._page)

    def log_request(self, request: Request) -> None:
        self._logger.info(
            "request",
            url=request.url,
            method=request.method,
            referrer=request.referrer,
            headers=dict(request.headers),
        )

    def log_response(self, response: Response) -> None:
        self._logger.info(
            "response",
            status_code=response.status_code,
            reason=response.reason,
            headers=dict(response.headers),
        )

    def log_handler_info(self, handler: str, info: Mapping[str, Any]) -> None:
        self._logger.info("handler_info", handler=handler, info=dict(info))

    def end_page(self) -> None:
        self._logger = self._base_logger
