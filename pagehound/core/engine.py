"""
Crawl engine for pagehound.

Drives the crawl loop: take the next request from the frontier, fetch it,
record the exchange in the log sink, build the document and pass it through
every handler. Handlers (the link appender in particular) feed new requests
back into the frontier; the crawl ends when the frontier is empty or a stop
is requested.

Exactly one request is in flight at any time.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pagehound.core.context import CrawlContext
from pagehound.core.queue import FrontierQueue
from pagehound.core.transport import HttpxTransport, Transport, TransportConfig
from pagehound.documents import build_document
from pagehound.exceptions import AlreadyConfiguredError, ConfigurationError, TransportError
from pagehound.models import Request, Response
from pagehound.sinks.base import LogSink
from pagehound.sinks.xml_sink import XmlLogSink
from pagehound.utils import metrics
from pagehound.utils.logging import CrawlerLogger
from pagehound.utils.url_utils import parse_http_url

if TYPE_CHECKING:
    from pagehound.handlers.base import Handler


@dataclass
class EngineConfig:
    """Configuration for the crawl engine."""

    delay: float = 0.0  # seconds between requests
    save_cookies: bool = True
    lifo: bool = False
    http_opts: dict[str, Any] = field(default_factory=dict)


class Engine:
    """
    Main crawl orchestrator.

    Owns the frontier queue, the handler chain, the log sink and the
    transport, and runs them in a strictly sequential loop.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        transport: Transport | None = None,
        logger: CrawlerLogger | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration.
            transport: HTTP transport; defaults to an HttpxTransport built
                from config.http_opts.
            logger: Logger instance.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        self.config = config or EngineConfig()
        if self.config.delay < 0:
            raise ConfigurationError("Delay must not be negative", option="delay")

        self.logger = logger or CrawlerLogger("engine")
        self._queue = FrontierQueue(lifo=self.config.lifo)
        self._transport: Transport = transport or HttpxTransport(
            TransportConfig.from_options(self.config.http_opts),
            save_cookies=self.config.save_cookies,
        )

        self._handlers: list["Handler"] = []
        self._log_sink: LogSink | None = None
        self._base_url: str | None = None
        self._request_counter = 0

        self._running = False
        self._stop_event = asyncio.Event()

    @property
    def queue(self) -> FrontierQueue:
        return self._queue

    @property
    def handlers(self) -> tuple["Handler", ...]:
        return tuple(self._handlers)

    @property
    def base_url(self) -> str | None:
        """Seed URL of the current (or last) crawl."""
        return self._base_url

    @property
    def request_counter(self) -> int:
        """Number of requests performed so far."""
        return self._request_counter

    @property
    def log_sink(self) -> LogSink | None:
        return self._log_sink

    @property
    def running(self) -> bool:
        return self._running

    def set_log_sink(self, sink: LogSink) -> None:
        """
        Set the log sink.

        Raises:
            AlreadyConfiguredError: If a sink was already set.
        """
        if self._log_sink is not None:
            raise AlreadyConfiguredError("Log sink")
        self._log_sink = sink

    def add_handler(self, handler: "Handler") -> "Engine":
        """Append a handler to the chain. Handlers run in insertion order."""
        self._handlers.append(handler)
        return self

    def stop(self) -> None:
        """
        Request a cooperative stop.

        The loop finishes the page in progress, then exits; a pending
        inter-request delay is cut short.
        """
        self._stop_event.set()
        self.logger.info("Stop requested", requests=self._request_counter)

    async def run(self, seed_url: str) -> int:
        """
        Crawl starting from a seed URL.

        Args:
            seed_url: Absolute http/https URL to start from.

        Returns:
            The request counter when the crawl ends.

        Raises:
            InvalidURLError: If the seed URL is not a valid HTTP URL.
            AlreadyConfiguredError: If a crawl is already running.
        """
        if self._running:
            raise AlreadyConfiguredError("Running crawl")

        seed = Request(seed_url)
        self._running = True
        self._stop_event.clear()

        try:
            self._base_url = seed.url
            self._queue.append(seed)

            if self._log_sink is None:
                self._log_sink = XmlLogSink()

            context = CrawlContext(
                queue=self._queue,
                base_url=self._base_url,
                sink=self._log_sink,
                logger=self.logger,
            )

            self.logger.crawl_start(
                seed_url=seed.url,
                lifo=self._queue.lifo,
                handlers=[h.name for h in self._handlers],
            )

            while not self._stop_event.is_set():
                request = self._queue.next()
                if request is None:
                    break

                await self._process(request, context)
                self._request_counter += 1
                metrics.update_queue_size(self._queue.size())

                if self.config.delay > 0 and self._queue and not self._stop_event.is_set():
                    await self._wait(self.config.delay)

            self.logger.crawl_finished(
                requests=self._request_counter,
                pending=self._queue.size(),
                stopped=self._stop_event.is_set(),
            )
            return self._request_counter

        finally:
            self._running = False

    async def _process(self, request: Request, context: CrawlContext) -> None:
        """Fetch one request and run the handler chain on the result."""
        sink = context.sink
        sink.start_page()
        try:
            sink.log_request(request)

            try:
                response = await self._transport.fetch(request)
            except TransportError as e:
                self.logger.fetch_error(
                    url=request.url,
                    method=request.method,
                    error=e.reason,
                    referrer=request.referrer,
                )
                response = Response.failed(e.reason)

            sink.log_response(response)

            document = build_document(request, response)
            for handler in self._handlers:
                handler.call(document, context)
        finally:
            sink.end_page()

    async def _wait(self, delay: float) -> None:
        """Sleep between requests, waking early on stop()."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def authenticate_url(
        self,
        url: str,
        data: Mapping[str, str],
        method: str = "POST",
    ) -> Response:
        """
        Send credentials or other form fields before crawling.

        Useful to establish a login session whose cookies the crawl reuses.

        Args:
            url: Target URL.
            data: Form fields.
            method: "POST" sends the fields as the body, "GET" as the query.

        Returns:
            The response, for callers who want to check it.

        Raises:
            InvalidURLError: If the URL is not a valid HTTP URL.
            TransportError: If the request fails.
        """
        parse_http_url(url)
        response = await self._transport.submit(method.upper(), url, data)
        self.logger.info(
            "Authentication request sent",
            url=url,
            method=method.upper(),
            status_code=response.status_code,
        )
        return response

    async def close(self) -> None:
        """Close the transport and the log sink."""
        await self._transport.aclose()
        if self._log_sink is not None:
            self._log_sink.close()

    async def __aenter__(self) -> "Engine":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
