"""
Log sink interface.

A log sink receives the crawl record: one bracketed page per request, each
holding the request, the response and any number of handler records.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pagehound.models import Request, Response


class LogSink(ABC):
    """Destination for per-page crawl records."""

    @abstractmethod
    def start_page(self) -> None:
        """Open the record of a new page."""

    @abstractmethod
    def log_request(self, request: Request) -> None:
        """Record the request of the current page."""

    @abstractmethod
    def log_response(self, response: Response) -> None:
        """Record the response of the current page."""

    @abstractmethod
    def log_handler_info(self, handler: str, info: Mapping[str, Any]) -> None:
        """Record a key/value message produced by a handler."""

    @abstractmethod
    def end_page(self) -> None:
        """Close the record of the current page."""

    def close(self) -> None:
        """Flush and release the sink's target."""
