"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx
import pytest

from pagehound.core.context import CrawlContext
from pagehound.core.queue import FrontierQueue
from pagehound.core.transport import HttpxTransport
from pagehound.models import Request, Response
from pagehound.sinks.base import LogSink


# =============================================================================
# Recording Log Sink
# =============================================================================


class RecordingSink(LogSink):
    """Log sink that keeps every record in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.pages: list[dict[str, Any]] = []
        self.closed = False
        self._open = False

    def start_page(self) -> None:
        self.events.append(("start_page",))
        self.pages.append({"request": None, "response": None, "records": []})
        self._open = True

    def log_request(self, request: Request) -> None:
        self.events.append(("request", request))
        self.pages[-1]["request"] = request

    def log_response(self, response: Response) -> None:
        self.events.append(("response", response))
        self.pages[-1]["response"] = response

    def log_handler_info(self, handler: str, info: Mapping[str, Any]) -> None:
        self.events.append(("handler", handler, dict(info)))
        if self.pages:
            self.pages[-1]["records"].append((handler, dict(info)))

    def end_page(self) -> None:
        self.events.append(("end_page",))
        self._open = False

    def close(self) -> None:
        self.closed = True

    @property
    def records(self) -> list[tuple[str, dict[str, Any]]]:
        """All handler records in order."""
        return [(e[1], e[2]) for e in self.events if e[0] == "handler"]

    @property
    def requested_urls(self) -> list[str]:
        return [page["request"].url for page in self.pages]


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Provide an in-memory log sink."""
    return RecordingSink()


@pytest.fixture
def context(recording_sink: RecordingSink) -> CrawlContext:
    """Provide a crawl context seeded at http://a.test/."""
    return CrawlContext(
        queue=FrontierQueue(),
        base_url="http://a.test/",
        sink=recording_sink,
    )


# =============================================================================
# Mock HTTP Site
# =============================================================================

Page = tuple[int, dict[str, str], bytes]


class MockSite:
    """
    A fake web site served through httpx.MockTransport.

    Unknown URLs answer 404; URLs listed in failures raise a connection error.
    """

    def __init__(self, pages: dict[str, Page] | None = None):
        self.pages: dict[str, Page] = dict(pages or {})
        self.failures: set[str] = set()
        self.requests: list[httpx.Request] = []

    def add(self, url: str, body: str | bytes, status: int = 200,
            content_type: str = "text/html", headers: dict[str, str] | None = None) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.pages[url] = (status, {"content-type": content_type, **(headers or {})}, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url in self.failures:
            raise httpx.ConnectError("connection refused", request=request)
        if url not in self.pages:
            return httpx.Response(404, headers={"content-type": "text/plain"}, content=b"not found")
        status, headers, body = self.pages[url]
        return httpx.Response(status, headers=headers, content=body)

    def transport(self, **kwargs: Any) -> HttpxTransport:
        return HttpxTransport(transport=httpx.MockTransport(self.handler), **kwargs)

    @property
    def requested_urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def mock_site() -> MockSite:
    """Provide an empty fake web site."""
    return MockSite()


@pytest.fixture
def make_response() -> Callable[..., Response]:
    """Factory for Response objects."""
    def _make(body: str | bytes = b"", status: int = 200,
              content_type: str | None = "text/html", **headers: str) -> Response:
        if isinstance(body, str):
            body = body.encode("utf-8")
        all_headers = dict(headers)
        if content_type is not None:
            all_headers["content-type"] = content_type
        return Response(status_code=status, reason="OK", headers=all_headers, body=body)
    return _make


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_html_links() -> str:
    """HTML page with every kind of link the crawler knows about."""
    return """
<!DOCTYPE html>
<html>
<head>
    <title>Links</title>
    <link rel="stylesheet" href="/style.css">
    <script src="/app.js"></script>
    <script>var inline = true;</script>
</head>
<body>
    <a href="c/d.html">Relative</a>
    <a href="/e.html">Absolute path</a>
    <a href="http://b.test/">Other site</a>
    <a name="anchor-only">No href</a>
    <img src="/logo.png" alt="logo">
    <iframe src="/frame.html"></iframe>
</body>
</html>
    """.strip()
