"""
Structural query handlers.

XPath records every node matching a query; NotXPath records documents in
which the query matches nothing. Both ignore documents without a parsed
tree (anything that is not XML or HTML).
"""

from typing import Any

from lxml import etree

from pagehound.core.context import CrawlContext
from pagehound.documents import Document
from pagehound.exceptions import ConfigurationError
from pagehound.handlers.base import Handler


def compile_query(query: Any, option: str = "query") -> etree.XPath:
    """
    Compile an XPath expression.

    Raises:
        ConfigurationError: If the query is missing or does not compile.
    """
    if not isinstance(query, str) or not query.strip():
        raise ConfigurationError(f"XPath handler requires a '{option}' expression", option=option)
    try:
        return etree.XPath(query)
    except etree.XPathSyntaxError as e:
        raise ConfigurationError(f"Invalid XPath expression '{query}': {e}", option=option) from e


def string_value(result: Any) -> str:
    """Convert an XPath evaluation result to its string value."""
    if isinstance(result, list):
        if not result:
            return ""
        result = result[0]
    if isinstance(result, etree._Element):
        return "".join(result.itertext())
    if isinstance(result, bool):
        return "true" if result else ""
    if isinstance(result, float) and result.is_integer():
        return str(int(result))
    return str(result)


class XPath(Handler):
    """Record one message per node matching an XPath query."""

    type_name = "XPath"
    OPTIONS = {
        "query": "query",
        "message": "message",
        "capturevalue": "capture_value",
        "capture_value": "capture_value",
    }

    def __init__(
        self,
        query: str | None = None,
        message: str | None = None,
        capture_value: str | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._query = compile_query(query)
        self.query = query
        self.message = message
        self.capture_value = capture_value
        self._capture = compile_query(capture_value, "captureValue") if capture_value else None

    def handle(self, document: Document, context: CrawlContext) -> None:
        structured = document.as_structured()
        if structured is None:
            return

        nodes = structured.xpath(self._query)
        if not isinstance(nodes, list):
            return

        for node in nodes:
            info: dict[str, Any] = {"query": self.query}
            if self.message:
                info["message"] = self.message
            if self._capture is not None:
                value = self._capture_from(structured, node)
                if value:
                    info["captureValue"] = value
            context.log(self.name, info)

    def _capture_from(self, structured: Any, node: Any) -> str:
        """Evaluate captureValue relative to a matched node."""
        if isinstance(node, etree._Element):
            return string_value(structured.xpath(self._capture, node))

        # Attribute and text results: "." is the result itself
        if self.capture_value.strip() in (".", "string(.)"):
            return string_value(node)
        parent = node.getparent() if hasattr(node, "getparent") else None
        if parent is None:
            return ""
        return string_value(structured.xpath(self._capture, parent))


class NotXPath(Handler):
    """Record a message when an XPath query matches nothing."""

    type_name = "NotXPath"
    OPTIONS = {"query": "query", "message": "message"}

    def __init__(self, query: str | None = None, message: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self._query = compile_query(query)
        self.query = query
        self.message = message

    def handle(self, document: Document, context: CrawlContext) -> None:
        structured = document.as_structured()
        if structured is None:
            return

        if not structured.xpath(self._query):
            info: dict[str, Any] = {"query": self.query}
            if self.message:
                info["message"] = self.message
            context.log(self.name, info)
