"""
Core data models for pagehound.

Request and Response are the value objects exchanged between the frontier,
the transport, the log sinks and the document factory.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pagehound.exceptions import AlreadyConfiguredError
from pagehound.utils.url_utils import parse_http_url

HeaderValue = str | list[str]


def lower_keys(headers: Mapping[str, HeaderValue] | None) -> dict[str, HeaderValue]:
    """Case-fold header names."""
    return {str(k).lower(): v for k, v in (headers or {}).items()}


class Request:
    """
    An outbound HTTP request.

    The target URL is validated on construction. Everything except the
    referrer is immutable; the referrer is set once by whoever enqueues the
    request.
    """

    __slots__ = ("_url", "_parts", "_method", "_headers", "_body", "_referrer")

    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: bytes | str = b"",
        referrer: str | None = None,
    ):
        """
        Create a request.

        Args:
            url: Absolute http/https URL.
            method: HTTP method.
            headers: Request headers; names are case-folded.
            body: Request body for POST/PUT requests.
            referrer: URL of the page that linked here.

        Raises:
            InvalidURLError: If the URL is not a valid HTTP URL.
        """
        self._parts = parse_http_url(url)
        self._url = url
        self._method = method.upper()
        self._headers = MappingProxyType(lower_keys(headers))
        self._body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self._referrer = str(referrer) if referrer is not None else None

    @property
    def url(self) -> str:
        return self._url

    @property
    def host(self) -> str:
        return (self._parts.hostname or "").lower()

    @property
    def method(self) -> str:
        return self._method

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def referrer(self) -> str | None:
        return self._referrer

    def set_referrer(self, referrer: str) -> None:
        """
        Record the page that referred this request.

        Raises:
            AlreadyConfiguredError: If a referrer was already recorded.
        """
        if self._referrer is not None:
            raise AlreadyConfiguredError("Request referrer")
        self._referrer = str(referrer)

    def header(self, name: str) -> str | None:
        """Get a single request header by case-insensitive name."""
        return self._headers.get(name.lower())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Request):
            return NotImplemented
        return (
            self._url == other._url
            and self._method == other._method
            and dict(self._headers) == dict(other._headers)
            and self._body == other._body
        )

    def __hash__(self) -> int:
        return hash((self._url, self._method))

    def __repr__(self) -> str:
        return f"Request({self._method} {self._url!r})"


@dataclass(frozen=True)
class Response:
    """An inbound HTTP response, as produced by the transport."""

    status_code: int
    reason: str = ""
    headers: Mapping[str, HeaderValue] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(lower_keys(self.headers)))

    @classmethod
    def failed(cls, message: str) -> "Response":
        """Create the synthetic response used when no exchange took place."""
        return cls(status_code=0, reason=message)

    def is_transport_failure(self) -> bool:
        """Check if this response stands in for a failed exchange."""
        return self.status_code == 0

    def header(self, name: str) -> str | None:
        """
        Get a header by case-insensitive name.

        Returns:
            The first value of a multi-valued header, or None if absent.
        """
        value = self.headers.get(name.lower())
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def header_items(self) -> list[tuple[str, str]]:
        """All headers as (name, value) pairs, expanding multi-valued ones."""
        items: list[tuple[str, str]] = []
        for name, value in self.headers.items():
            if isinstance(value, list):
                items.extend((name, v) for v in value)
            else:
                items.append((name, value))
        return items
