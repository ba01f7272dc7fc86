"""
Base class for document handlers.

A handler is called once per fetched document. Its applicability filter
(status codes and content types) decides whether handle() runs; handle()
reports findings as handler records through the crawl context.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from pagehound.core.context import CrawlContext
from pagehound.documents import Document
from pagehound.utils import metrics
from pagehound.utils.options import as_int, as_list, normalize_options

# Keys every handler understands
COMMON_OPTIONS = {
    "status": "status",
    "content-type": "content_type",
    "content_type": "content_type",
    "contenttype": "content_type",
}


class Handler(ABC):
    """
    Abstract document handler.

    Subclasses set type_name (the registry name, also the default record
    name) and OPTIONS (lower-case option key to constructor keyword), and
    implement handle().
    """

    type_name: ClassVar[str] = "handler"
    OPTIONS: ClassVar[dict[str, str]] = {}

    def __init__(
        self,
        name: str | None = None,
        status: int | list[int] | None = None,
        content_type: str | list[str] | None = None,
    ):
        """
        Initialize the handler.

        Args:
            name: Name used to attribute handler records.
            status: Status code(s) this handler applies to (None = any).
            content_type: Raw content-type header value(s) this handler
                applies to, compared exactly (None = any).
        """
        self.name = name or self.type_name
        self.status = tuple(as_int(code, "status") for code in as_list(status))
        self.content_type = tuple(str(value) for value in as_list(content_type))

    def applies_to(self, document: Document) -> str | None:
        """
        Check the applicability filter.

        Returns:
            None if the handler applies, otherwise the reason it does not.
        """
        if self.status and document.status not in self.status:
            return f"status {document.status} not in {list(self.status)}"
        if self.content_type and document.content_type not in self.content_type:
            return f"content type {document.content_type!r} not accepted"
        return None

    def call(self, document: Document, context: CrawlContext) -> None:
        """Run handle() if the document passes the applicability filter."""
        reason = self.applies_to(document)
        if reason is not None:
            context.logger.handler_skipped(handler=self.name, url=document.url, reason=reason)
            metrics.record_handler_call(self.name, called=False)
            return

        metrics.record_handler_call(self.name, called=True)
        self.handle(document, context)

    @abstractmethod
    def handle(self, document: Document, context: CrawlContext) -> None:
        """Process a document that passed the filter."""

    @classmethod
    def from_options(cls, name: str | None, options: Mapping[str, Any] | None) -> "Handler":
        """
        Build a handler from a configuration mapping.

        Args:
            name: Handler name for log attribution.
            options: Handler options; "status" and "content-type" are always
                accepted, plus the handler's own OPTIONS.

        Raises:
            ConfigurationError: If an option is unknown or invalid.
        """
        keys = {**COMMON_OPTIONS, **cls.OPTIONS}
        opts = normalize_options(options, keys, cls.type_name)
        kwargs = {keys[key]: value for key, value in opts.items()}
        return cls(name=name, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
