"""
Document variants for pagehound.

A document is a read-only view of one HTTP exchange: the request URL plus
the response status, headers and body. Documents do not necessarily
represent a real page; a 404 or a 302 is still a document.

Variants form a closed set:

- Document: generic fallback, no parsing.
- XmlDocument: body parsed into a tree that supports XPath queries.
- HtmlDocument: an XmlDocument parsed as HTML, with link collections.

Handlers ask for a capability with as_structured() / as_html() instead of
testing the concrete class.
"""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from lxml import etree

from pagehound.models import HeaderValue, lower_keys

_MIME_TOKEN = re.compile(r"^[^;\s]+")
_CHARSET = re.compile(r";\s*charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)

XPathQuery = str | etree.XPath


class DocumentKind(str, Enum):
    """Document variant tags."""

    GENERIC = "generic"
    XML = "xml"
    HTML = "html"


class LinkKind(str, Enum):
    """Link collections an HTML document exposes, in harvesting order."""

    ANCHOR = "anchor"
    IMAGE = "image"
    HEADER_LINK = "header_link"
    SCRIPT = "script"
    FRAME = "frame"


LINK_QUERIES: dict[LinkKind, etree.XPath] = {
    LinkKind.ANCHOR: etree.XPath("//a[@href]/@href"),
    LinkKind.IMAGE: etree.XPath("//img[@src]/@src"),
    LinkKind.HEADER_LINK: etree.XPath("//link[@href]/@href"),
    LinkKind.SCRIPT: etree.XPath("//script[@src]/@src"),
    LinkKind.FRAME: etree.XPath("//frame[@src]/@src | //iframe[@src]/@src"),
}


def sniff_mime_type(content_type: str | None) -> str:
    """
    Extract the MIME type token from a content-type header value.

    Returns:
        Everything before the first ';' or whitespace, or "" if absent.
    """
    if not content_type:
        return ""
    match = _MIME_TOKEN.match(content_type)
    return match.group(0) if match else ""


def sniff_charset(content_type: str | None) -> str | None:
    """Extract the charset parameter from a content-type header value."""
    if not content_type:
        return None
    match = _CHARSET.search(content_type)
    return match.group(1) if match else None


class Document:
    """Generic document: URL, status, headers and body only."""

    kind = DocumentKind.GENERIC

    def __init__(
        self,
        url: str,
        status: int,
        headers: Mapping[str, HeaderValue],
        body: bytes,
    ):
        self._url = url
        self._status = status
        self._headers = lower_keys(headers)
        self._body = body

    @property
    def url(self) -> str:
        return self._url

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> Mapping[str, HeaderValue]:
        return self._headers

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def content_type(self) -> str | None:
        """Raw content-type header value."""
        return self.header("content-type")

    @property
    def mime_type(self) -> str:
        """MIME type token sniffed from the content-type header."""
        return sniff_mime_type(self.content_type)

    def header(self, name: str) -> str | None:
        """Get a header by case-insensitive name (first value if repeated)."""
        value = self._headers.get(name.lower())
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def as_structured(self) -> "XmlDocument | None":
        """This document as a queryable tree, if it has one."""
        return None

    def as_html(self) -> "HtmlDocument | None":
        """This document as HTML with link collections, if it is HTML."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._url!r}, status={self._status})"


class XmlDocument(Document):
    """
    Document whose body is parsed into a tree on construction.

    Parsing is permissive: malformed markup yields a best-effort tree, and a
    body that cannot be parsed at all leaves the tree empty (None). Queries
    against an empty tree match nothing.
    """

    kind = DocumentKind.XML

    def __init__(
        self,
        url: str,
        status: int,
        headers: Mapping[str, HeaderValue],
        body: bytes,
    ):
        super().__init__(url, status, headers, body)
        self._tree = self._parse(body)

    def _make_parser(self, encoding: str | None) -> etree._FeedParser:
        return etree.XMLParser(
            recover=True,
            encoding=encoding,
            resolve_entities=False,
            no_network=True,
        )

    def _parse(self, body: bytes) -> etree._Element | None:
        if not body or not body.strip():
            return None

        try:
            parser = self._make_parser(sniff_charset(self.content_type))
        except LookupError:
            # Unknown charset in the header, let lxml detect it
            parser = self._make_parser(None)

        try:
            return etree.fromstring(body, parser)
        except (etree.LxmlError, ValueError):
            return None

    @property
    def tree(self) -> etree._Element | None:
        """Root element of the parsed body, or None if nothing parsed."""
        return self._tree

    def xpath(self, query: XPathQuery, node: Any = None) -> Any:
        """
        Evaluate an XPath query.

        Args:
            query: XPath expression, as text or pre-compiled.
            node: Context node; defaults to the document root.

        Returns:
            A list of nodes/strings for node-set expressions, or a scalar
            (str, float, bool) for other expressions. An empty tree or a
            query that cannot be evaluated here gives [].
        """
        context = node if node is not None else self._tree
        if context is None:
            return []

        try:
            if isinstance(query, etree.XPath):
                return query(context)
            return context.xpath(query)
        except etree.XPathError:
            return []

    def as_structured(self) -> "XmlDocument | None":
        return self


class HtmlDocument(XmlDocument):
    """
    HTML document with link collections.

    Each collection is computed from the tree the first time it is asked
    for and cached per document, so later calls return the same tuple.
    """

    kind = DocumentKind.HTML

    def __init__(
        self,
        url: str,
        status: int,
        headers: Mapping[str, HeaderValue],
        body: bytes,
    ):
        super().__init__(url, status, headers, body)
        self._link_cache: dict[LinkKind, tuple[str, ...]] = {}

    def _make_parser(self, encoding: str | None) -> etree._FeedParser:
        return etree.HTMLParser(recover=True, encoding=encoding, no_network=True)

    def links_of(self, kind: LinkKind) -> tuple[str, ...]:
        """
        Get the raw href/src values of one link collection.

        Values are returned as written in the markup (possibly relative or
        malformed), in document order.
        """
        if kind not in self._link_cache:
            values = self.xpath(LINK_QUERIES[kind]) if self._tree is not None else []
            self._link_cache[kind] = tuple(str(v) for v in values)
        return self._link_cache[kind]

    def links(self) -> tuple[str, ...]:
        """All <a href> targets."""
        return self.links_of(LinkKind.ANCHOR)

    def images(self) -> tuple[str, ...]:
        """All <img src> targets."""
        return self.links_of(LinkKind.IMAGE)

    def header_links(self) -> tuple[str, ...]:
        """All <link href> targets (stylesheets, feeds, etc.)."""
        return self.links_of(LinkKind.HEADER_LINK)

    def scripts(self) -> tuple[str, ...]:
        """All <script src> targets."""
        return self.links_of(LinkKind.SCRIPT)

    def frames(self) -> tuple[str, ...]:
        """All <frame src> and <iframe src> targets."""
        return self.links_of(LinkKind.FRAME)

    def as_html(self) -> "HtmlDocument | None":
        return self
