"""
Exception hierarchy for pagehound.

All exceptions inherit from CrawlerError to allow catching all crawler-related errors.
"""

from datetime import datetime, timezone
from typing import Any


class CrawlerError(Exception):
    """Base exception for all crawler errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)


# =============================================================================
# Input Errors
# =============================================================================


class InvalidURLError(CrawlerError):
    """A URL is malformed or does not use the http/https scheme."""

    def __init__(self, url: str, reason: str = "malformed"):
        super().__init__(
            f"'{url}' is not a valid HTTP URL ({reason})",
            {"url": url, "reason": reason},
        )
        self.url = url
        self.reason = reason


class ConfigurationError(CrawlerError):
    """A component was configured with a missing or invalid option."""

    def __init__(self, message: str, option: str | None = None):
        super().__init__(message, {"option": option})
        self.option = option


class UnsupportedTypeError(ConfigurationError):
    """A configured handler or log sink type is not registered."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"Unsupported {kind} type: '{name}'", option="type")
        self.kind = kind
        self.name = name


class AlreadyConfiguredError(CrawlerError):
    """A one-shot setup step was invoked a second time."""

    def __init__(self, what: str):
        super().__init__(f"{what} was already set", {"what": what})
        self.what = what


# =============================================================================
# Crawl Errors
# =============================================================================


class TransportError(CrawlerError):
    """A single HTTP exchange failed at the network or protocol level."""

    def __init__(self, url: str, message: str, method: str = "GET"):
        super().__init__(
            f"{method} {url} failed: {message}",
            {"url": url, "method": method},
        )
        self.url = url
        self.method = method
        self.reason = message


class LinkResolutionError(CrawlerError):
    """A discovered link could not be turned into an absolute URL."""

    def __init__(self, link: str, source_url: str, reason: str):
        super().__init__(
            f"Unable to parse link URL: {reason}",
            {"link": link, "source_url": source_url},
        )
        self.link = link
        self.source_url = source_url
        self.reason = reason


# =============================================================================
# Output Errors
# =============================================================================


class LogSinkError(CrawlerError):
    """A log sink could not open or write its target."""

    pass
