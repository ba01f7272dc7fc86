"""
HTTP transport for pagehound.

Performs single HTTP exchanges for the crawl engine. Redirects are never
followed: a 3xx response is handed back as-is so that the Location target is
discovered (or not) like any other link.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from pagehound import __version__
from pagehound.exceptions import ConfigurationError, TransportError
from pagehound.models import HeaderValue, Request, Response
from pagehound.utils import metrics
from pagehound.utils.logging import CrawlerLogger
from pagehound.utils.url_utils import get_host


class Transport(Protocol):
    """Protocol for the HTTP collaborator of the crawl engine."""

    async def fetch(self, request: Request) -> Response:
        """Perform a request and return the response."""
        ...

    async def submit(self, method: str, url: str, data: Mapping[str, str]) -> Response:
        """Send form fields to a URL (POST body or GET query)."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


@dataclass
class TransportConfig:
    """Configuration for the HTTP transport."""

    user_agent: str = f"pagehound/{__version__}"
    timeout_seconds: float = 30.0
    verify_ssl: bool = True
    max_content_size: int = 10 * 1024 * 1024  # 10MB
    headers: dict[str, str] = field(default_factory=dict)

    _OPTION_NAMES = {
        "useragent": "user_agent",
        "user_agent": "user_agent",
        "timeout": "timeout_seconds",
        "verify": "verify_ssl",
        "sslverify": "verify_ssl",
        "maxcontentsize": "max_content_size",
        "headers": "headers",
    }

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> "TransportConfig":
        """
        Build a transport configuration from crawl-file HTTP options.

        Raises:
            ConfigurationError: If an option is unknown or has a bad value.
        """
        kwargs: dict[str, Any] = {}
        for key, value in (options or {}).items():
            attr = cls._OPTION_NAMES.get(str(key).lower())
            if attr is None:
                raise ConfigurationError(f"Unknown HTTP option '{key}'", option=str(key))
            kwargs[attr] = value

        try:
            if "timeout_seconds" in kwargs:
                kwargs["timeout_seconds"] = float(kwargs["timeout_seconds"])
            if "max_content_size" in kwargs:
                kwargs["max_content_size"] = int(kwargs["max_content_size"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid HTTP option value: {e}") from e

        if "headers" in kwargs:
            if not isinstance(kwargs["headers"], Mapping):
                raise ConfigurationError("HTTP option 'headers' must be a mapping", option="headers")
            kwargs["headers"] = {str(k): str(v) for k, v in kwargs["headers"].items()}

        return cls(**kwargs)


def _collect_headers(headers: httpx.Headers) -> dict[str, HeaderValue]:
    """Fold httpx headers into a dict, keeping repeated headers as lists."""
    collected: dict[str, HeaderValue] = {}
    for name, value in headers.multi_items():
        name = name.lower()
        if name not in collected:
            collected[name] = value
        elif isinstance(collected[name], list):
            collected[name].append(value)
        else:
            collected[name] = [collected[name], value]
    return collected


class HttpxTransport:
    """
    Transport backed by an httpx.AsyncClient.

    Network and protocol failures, timeouts and oversized bodies all surface
    as TransportError; HTTP error statuses are ordinary responses.
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        save_cookies: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: CrawlerLogger | None = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Transport configuration.
            save_cookies: Keep cookies between requests.
            transport: Low-level httpx transport (tests pass httpx.MockTransport).
            logger: Logger instance.
        """
        self.config = config or TransportConfig()
        self.save_cookies = save_cookies
        self.logger = logger or CrawlerLogger("transport")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                follow_redirects=False,
                verify=self.config.verify_ssl,
                headers={"User-Agent": self.config.user_agent, **self.config.headers},
                transport=self._transport,
            )
        return self._client

    async def fetch(self, request: Request) -> Response:
        """
        Perform a request.

        Args:
            request: The request to send.

        Returns:
            The response, whatever its status code.

        Raises:
            TransportError: If no complete response could be obtained.
        """
        headers = dict(request.headers)
        if request.referrer and "referer" not in headers:
            headers["referer"] = request.referrer

        return await self._send(
            request.method,
            request.url,
            headers=headers,
            content=request.body or None,
        )

    async def submit(self, method: str, url: str, data: Mapping[str, str]) -> Response:
        """
        Send form fields to a URL.

        POST (and other body-carrying methods) send the fields form-encoded;
        GET sends them as the query string.
        """
        method = method.upper()
        if method == "GET":
            return await self._send(method, url, params=dict(data))
        return await self._send(method, url, data=dict(data))

    async def _send(self, method: str, url: str, **kwargs: Any) -> Response:
        client = self._get_client()
        host = get_host(url)
        start_time = time.monotonic()

        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            metrics.record_transport_error(host, method)
            raise TransportError(
                url, f"timed out after {self.config.timeout_seconds}s", method
            ) from e
        except httpx.HTTPError as e:
            metrics.record_transport_error(host, method)
            raise TransportError(url, str(e) or type(e).__name__, method) from e
        except (httpx.InvalidURL, UnicodeError, ValueError) as e:
            # Hosts that urllib accepts but httpx cannot encode (IDNA)
            metrics.record_transport_error(host, method)
            raise TransportError(url, f"invalid URL: {e}", method) from e
        finally:
            if not self.save_cookies:
                client.cookies.clear()

        # Check content length
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.config.max_content_size:
                metrics.record_transport_error(host, method)
                raise TransportError(
                    url,
                    f"content too large ({content_length} > {self.config.max_content_size} bytes)",
                    method,
                )

        content = response.content
        if len(content) > self.config.max_content_size:
            metrics.record_transport_error(host, method)
            raise TransportError(
                url,
                f"content too large ({len(content)} > {self.config.max_content_size} bytes)",
                method,
            )

        duration = time.monotonic() - start_time
        metrics.record_fetch(
            host=host,
            method=method,
            status_code=response.status_code,
            duration_seconds=duration,
            content_size=len(content),
        )
        self.logger.page_fetched(
            url=url,
            status_code=response.status_code,
            duration_ms=duration * 1000,
            content_length=len(content),
        )

        return Response(
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=_collect_headers(response.headers),
            body=content,
        )

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
