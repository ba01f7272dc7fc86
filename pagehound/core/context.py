"""
Crawl context handed to handlers.

Handlers never see the engine itself. They receive the few collaborators
they are allowed to touch: the frontier queue, the seed URL and a way to
write handler records into the current page of the crawl log.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pagehound.core.queue import FrontierQueue
from pagehound.sinks.base import LogSink
from pagehound.utils.logging import CrawlerLogger


@dataclass
class CrawlContext:
    """Per-crawl collaborators available to handlers."""

    queue: FrontierQueue
    base_url: str | None
    sink: LogSink
    logger: CrawlerLogger = field(default_factory=lambda: CrawlerLogger("handlers"))

    def log(self, handler_name: str, info: Mapping[str, Any]) -> None:
        """Write a handler record into the current page."""
        self.sink.log_handler_info(handler_name, info)
