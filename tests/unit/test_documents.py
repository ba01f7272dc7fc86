"""
Tests for document variants and the document factory.
"""

from collections.abc import Callable

import pytest

from pagehound.documents import (
    DOCUMENT_TYPES,
    Document,
    DocumentKind,
    HtmlDocument,
    LinkKind,
    XmlDocument,
    build_document,
    register_document_type,
    sniff_mime_type,
)
from pagehound.models import Request, Response


class TestSniffMimeType:
    """Tests for content-type sniffing."""

    @pytest.mark.parametrize("content_type,expected", [
        ("text/html", "text/html"),
        ("text/html; charset=utf-8", "text/html"),
        ("text/html ;charset=utf-8", "text/html"),
        ("application/xml", "application/xml"),
        ("", ""),
        (None, ""),
    ])
    def test_sniff(self, content_type: str | None, expected: str) -> None:
        """Test that the MIME token is everything before ';' or whitespace."""
        assert sniff_mime_type(content_type) == expected


class TestDocumentFactory:
    """Tests for variant selection."""

    @pytest.mark.parametrize("content_type,expected_class", [
        ("text/html", HtmlDocument),
        ("text/html; charset=utf-8", HtmlDocument),
        ("text/xhtml", HtmlDocument),
        ("text/xml", XmlDocument),
        ("application/xml; charset=utf-8", XmlDocument),
        ("application/json", Document),
        ("image/png", Document),
        ("TEXT/HTML", Document),
        ("application/xhtml+xml", Document),
    ])
    def test_variant_selection(
        self,
        make_response: Callable[..., Response],
        content_type: str,
        expected_class: type,
    ) -> None:
        """Test that the variant follows the exact MIME token."""
        document = build_document(
            Request("http://a.test/"),
            make_response("<root/>", content_type=content_type),
        )

        assert type(document) is expected_class

    def test_missing_content_type_is_generic(self, make_response: Callable[..., Response]) -> None:
        """Test that a response without content-type gives a generic document."""
        document = build_document(Request("http://a.test/"), make_response("x", content_type=None))

        assert type(document) is Document
        assert document.kind == DocumentKind.GENERIC
        assert document.mime_type == ""

    def test_document_fields(self, make_response: Callable[..., Response]) -> None:
        """Test that URL, status, headers and body are carried over."""
        response = make_response("<p>hi</p>", status=404, **{"x-extra": "1"})
        document = build_document(Request("http://a.test/missing"), response)

        assert document.url == "http://a.test/missing"
        assert document.status == 404
        assert document.body == b"<p>hi</p>"
        assert document.header("X-Extra") == "1"
        assert document.content_type == "text/html"

    def test_failed_response_is_generic(self) -> None:
        """Test that the synthetic failure response becomes a generic document."""
        document = build_document(Request("http://a.test/"), Response.failed("timeout"))

        assert type(document) is Document
        assert document.status == 0
        assert document.body == b""

    def test_register_document_type(self, make_response: Callable[..., Response]) -> None:
        """Test extending the registry with a new MIME token."""
        try:
            register_document_type("application/xhtml+xml", HtmlDocument)
            document = build_document(
                Request("http://a.test/"),
                make_response("<html><body/></html>", content_type="application/xhtml+xml"),
            )
            assert type(document) is HtmlDocument
        finally:
            DOCUMENT_TYPES.pop("application/xhtml+xml", None)


class TestCapabilities:
    """Tests for capability accessors."""

    def test_generic_has_no_capabilities(self) -> None:
        document = Document("http://a.test/", 200, {}, b"")

        assert document.as_structured() is None
        assert document.as_html() is None

    def test_direct_construction_folds_header_names(self) -> None:
        """Test that mixed-case header names are found without the factory."""
        document = Document("http://a.test/", 200, {"Content-Type": "text/html; charset=utf-8"}, b"")

        assert document.content_type == "text/html; charset=utf-8"
        assert document.mime_type == "text/html"
        assert list(document.headers) == ["content-type"]

    def test_xml_is_structured_only(self) -> None:
        document = XmlDocument("http://a.test/", 200, {}, b"<root/>")

        assert document.as_structured() is document
        assert document.as_html() is None
        assert document.kind == DocumentKind.XML

    def test_html_has_both(self) -> None:
        document = HtmlDocument("http://a.test/", 200, {}, b"<html></html>")

        assert document.as_structured() is document
        assert document.as_html() is document
        assert document.kind == DocumentKind.HTML


class TestXmlDocument:
    """Tests for parsing and XPath queries."""

    def test_xpath_on_xml(self) -> None:
        """Test node-set and scalar queries."""
        document = XmlDocument(
            "http://a.test/feed.xml",
            200,
            {"content-type": "text/xml"},
            b"<feed><item id='1'>A</item><item id='2'>B</item></feed>",
        )

        items = document.xpath("//item")
        assert [item.text for item in items] == ["A", "B"]
        assert document.xpath("count(//item)") == 2.0
        assert document.xpath("//item/@id") == ["1", "2"]

    def test_xpath_relative_to_node(self) -> None:
        """Test evaluating a query relative to a context node."""
        document = XmlDocument("http://a.test/", 200, {}, b"<r><a><b>1</b></a><a><b>2</b></a></r>")
        second = document.xpath("//a")[1]

        assert document.xpath("string(b)", second) == "2"

    def test_malformed_xml_recovers(self) -> None:
        """Test that broken markup never raises."""
        document = XmlDocument("http://a.test/", 200, {}, b"<root><open></root")

        assert document.xpath("//nothing") == []

    @pytest.mark.parametrize("body", [b"", b"   \n", b"\x00\x01 not markup"])
    def test_unparseable_body_gives_empty_tree(self, body: bytes) -> None:
        """Test that queries on an empty tree match nothing."""
        document = XmlDocument("http://a.test/", 200, {}, body)

        assert document.xpath("//*") == []

    def test_unknown_charset_falls_back(self) -> None:
        """Test that an unknown charset parameter does not break parsing."""
        document = HtmlDocument(
            "http://a.test/",
            200,
            {"content-type": "text/html; charset=no-such-charset"},
            b"<html><body><a href='/x'>x</a></body></html>",
        )

        assert document.links() == ("/x",)


class TestHtmlDocument:
    """Tests for HTML link collections."""

    def test_link_collections(self, sample_html_links: str) -> None:
        """Test each collection in document order."""
        document = HtmlDocument("http://a.test/", 200, {}, sample_html_links.encode())

        assert document.links() == ("c/d.html", "/e.html", "http://b.test/")
        assert document.images() == ("/logo.png",)
        assert document.header_links() == ("/style.css",)
        assert document.scripts() == ("/app.js",)
        assert document.frames() == ("/frame.html",)

    def test_links_are_memoized(self, sample_html_links: str) -> None:
        """Test that repeated calls return the identical tuple."""
        document = HtmlDocument("http://a.test/", 200, {}, sample_html_links.encode())

        first = document.links()
        assert document.links() is first
        assert document.links_of(LinkKind.ANCHOR) is first

    def test_malformed_html(self) -> None:
        """Test that unclosed tags still yield links."""
        document = HtmlDocument(
            "http://a.test/",
            200,
            {},
            b"<html><body><a href='/one'>one<a href='/two'>two<div><p>",
        )

        assert document.links() == ("/one", "/two")

    def test_empty_html(self) -> None:
        """Test that an empty body has no links."""
        document = HtmlDocument("http://a.test/", 200, {}, b"")

        assert document.links() == ()
        assert document.images() == ()
