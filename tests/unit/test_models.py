"""
Tests for Request/Response value objects and URL utilities.
"""

from urllib.parse import urlsplit

import pytest

from pagehound.exceptions import AlreadyConfiguredError, InvalidURLError, LinkResolutionError
from pagehound.models import Request, Response
from pagehound.utils.url_utils import (
    get_host,
    host_matches_domain,
    is_valid_url,
    parse_http_url,
    resolve_link,
    split_link,
)


class TestRequest:
    """Tests for Request."""

    def test_defaults(self) -> None:
        """Test default method, headers and body."""
        request = Request("http://a.test/")

        assert request.url == "http://a.test/"
        assert request.method == "GET"
        assert dict(request.headers) == {}
        assert request.body == b""
        assert request.referrer is None
        assert request.host == "a.test"

    def test_method_upper_cased(self) -> None:
        """Test that the method is normalized."""
        assert Request("http://a.test/", method="post").method == "POST"

    def test_headers_case_folded_and_read_only(self) -> None:
        """Test header access by any case and immutability."""
        request = Request("http://a.test/", headers={"X-Token": "abc"})

        assert request.header("x-token") == "abc"
        assert request.header("X-TOKEN") == "abc"
        with pytest.raises(TypeError):
            request.headers["x-token"] = "other"  # type: ignore[index]

    def test_string_body_encoded(self) -> None:
        """Test that a text body is stored as UTF-8 bytes."""
        assert Request("http://a.test/", body="a=1").body == b"a=1"

    @pytest.mark.parametrize("url", [
        "ftp://a.test/",
        "mailto:someone@a.test",
        "/relative/path",
        "http://",
        "",
        "http://a.test:port/",
        "http://a.test/with space",
    ])
    def test_invalid_urls_rejected(self, url: str) -> None:
        """Test that invalid URLs raise InvalidURLError."""
        with pytest.raises(InvalidURLError):
            Request(url)

    def test_referrer_set_once(self) -> None:
        """Test that the referrer can only be set once."""
        request = Request("http://a.test/page")
        request.set_referrer("http://a.test/")

        assert request.referrer == "http://a.test/"
        with pytest.raises(AlreadyConfiguredError):
            request.set_referrer("http://a.test/other")

    def test_referrer_from_constructor_is_final(self) -> None:
        """Test that a constructor referrer cannot be replaced."""
        request = Request("http://a.test/page", referrer="http://a.test/")

        with pytest.raises(AlreadyConfiguredError):
            request.set_referrer("http://a.test/other")

    def test_equality(self) -> None:
        """Test value equality of requests."""
        assert Request("http://a.test/") == Request("http://a.test/")
        assert Request("http://a.test/") != Request("http://a.test/", method="POST")


class TestResponse:
    """Tests for Response."""

    def test_headers_lower_cased(self) -> None:
        """Test header lookup is case-insensitive."""
        response = Response(200, "OK", {"Content-Type": "text/html"}, b"x")

        assert response.header("content-type") == "text/html"
        assert response.header("CONTENT-TYPE") == "text/html"
        assert response.header("missing") is None

    def test_multi_valued_header(self) -> None:
        """Test that header() returns the first of several values."""
        response = Response(200, headers={"set-cookie": ["a=1", "b=2"]})

        assert response.header("set-cookie") == "a=1"
        assert response.header_items() == [("set-cookie", "a=1"), ("set-cookie", "b=2")]

    def test_frozen(self) -> None:
        """Test that responses are read-only."""
        response = Response(200)

        with pytest.raises(AttributeError):
            response.status_code = 404  # type: ignore[misc]

    def test_failed(self) -> None:
        """Test the synthetic failure response."""
        response = Response.failed("connection refused")

        assert response.status_code == 0
        assert response.reason == "connection refused"
        assert response.body == b""
        assert dict(response.headers) == {}
        assert response.is_transport_failure()
        assert not Response(200).is_transport_failure()


class TestUrlUtils:
    """Tests for URL helpers."""

    def test_parse_http_url(self) -> None:
        """Test that valid URLs parse."""
        parts = parse_http_url("https://A.test:8443/p?q=1#f")

        assert parts.hostname == "a.test"
        assert parts.port == 8443

    def test_is_valid_url(self) -> None:
        """Test the boolean validity check."""
        assert is_valid_url("http://a.test/")
        assert not is_valid_url("javascript:void(0)")

    def test_get_host(self) -> None:
        """Test host extraction."""
        assert get_host("http://User@Sub.A.test:80/x") == "sub.a.test"
        assert get_host("not a url") == ""

    @pytest.mark.parametrize("host,domain,expected", [
        ("a.test", "a.test", True),
        ("www.a.test", "a.test", True),
        ("deep.sub.a.test", "a.test", True),
        ("evila.test", "a.test", False),
        ("b.test", "a.test", False),
        ("A.TEST", "a.test", True),
    ])
    def test_host_matches_domain(self, host: str, domain: str, expected: bool) -> None:
        """Test domain and subdomain matching."""
        assert host_matches_domain(host, domain) is expected

    @pytest.mark.parametrize("source,link,expected", [
        ("http://a.test/", "c/d.html", "http://a.test/c/d.html"),
        ("http://a.test/", "/e.html", "http://a.test/e.html"),
        ("http://a.test/x/y.html", "z.html", "http://a.test/x/z.html"),
        ("http://a.test/x/y.html", "/z.html", "http://a.test/z.html"),
        ("http://a.test/x/", "z.html?p=1#top", "http://a.test/x/z.html?p=1#top"),
        ("http://a.test/x/?old=1", "z.html", "http://a.test/x/z.html"),
        ("http://a.test", "z.html", "http://a.test/z.html"),
        ("https://a.test:8443/x/", "z.html", "https://a.test:8443/x/z.html"),
    ])
    def test_resolve_link(self, source: str, link: str, expected: str) -> None:
        """Test relative link resolution against the source URL."""
        assert resolve_link(source, urlsplit(link)) == expected

    def test_resolve_link_rejects_whitespace(self) -> None:
        """Test that a link with whitespace cannot be resolved."""
        with pytest.raises(LinkResolutionError) as exc_info:
            resolve_link("http://a.test/", urlsplit("bad path.html"))

        assert exc_info.value.message.startswith("Unable to parse link URL")

    def test_split_link_unparseable(self) -> None:
        """Test that links with a broken port are unparseable."""
        assert split_link("http://a.test:99999999/") is None
        assert split_link("/fine") is not None
