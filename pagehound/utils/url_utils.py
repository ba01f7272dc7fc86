"""
URL manipulation utilities for pagehound.

Provides HTTP URL validation, host extraction, domain matching and the
relative link resolution used by the link appender.
"""

import re
from urllib.parse import SplitResult, urlsplit, urlunsplit

from pagehound.exceptions import InvalidURLError, LinkResolutionError

HTTP_SCHEMES = frozenset(["http", "https"])

# Characters a URL component may not carry unescaped
_INVALID_COMPONENT_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


def parse_http_url(url: str) -> SplitResult:
    """
    Parse and validate an absolute HTTP(S) URL.

    Args:
        url: The URL to validate.

    Returns:
        The split URL components.

    Raises:
        InvalidURLError: If the URL is not a well-formed http/https URL.
    """
    if not isinstance(url, str) or not url:
        raise InvalidURLError(str(url), "empty")

    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise InvalidURLError(url, str(e)) from e

    if parts.scheme.lower() not in HTTP_SCHEMES:
        raise InvalidURLError(url, f"unsupported scheme '{parts.scheme}'")
    if not parts.hostname:
        raise InvalidURLError(url, "missing host")
    if _INVALID_COMPONENT_CHARS.search(url):
        raise InvalidURLError(url, "contains whitespace or control characters")

    return parts


def is_valid_url(url: str) -> bool:
    """
    Check if a URL is valid and has an HTTP(S) scheme.

    Args:
        url: The URL to validate.

    Returns:
        True if URL is valid for crawling.
    """
    try:
        parse_http_url(url)
    except InvalidURLError:
        return False
    return True


def get_host(url: str) -> str:
    """
    Extract the host name from a URL.

    Args:
        url: The URL to extract the host from.

    Returns:
        The lower-cased host, without port or credentials.
    """
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def host_matches_domain(host: str, domain: str) -> bool:
    """
    Check whether a host belongs to a domain.

    The host matches when it equals the domain or is one of its subdomains.

    Args:
        host: Host name taken from a link.
        domain: Domain to match against.

    Returns:
        True if the host is inside the domain.
    """
    host = host.lower().rstrip(".")
    domain = domain.lower().strip(".")
    return host == domain or host.endswith(f".{domain}")


def split_link(link: str) -> SplitResult | None:
    """
    Split a raw href/src value into URL components.

    Returns:
        The components, or None if the value cannot be parsed at all.
    """
    try:
        parts = urlsplit(link.strip())
        parts.port
    except ValueError:
        return None
    return parts


def resolve_link(source_url: str, link: SplitResult) -> str:
    """
    Resolve a host-less link against the URL of the document it came from.

    Absolute paths replace the source path. Relative paths are appended to
    the source path's directory, that is everything up to and including its
    last '/'. The query and fragment always come from the link.

    Args:
        source_url: Absolute URL of the referring document.
        link: Components of a link that carries no host.

    Returns:
        The absolute URL.

    Raises:
        LinkResolutionError: If the result is not a valid HTTP URL.
    """
    raw = urlunsplit(link)
    source = urlsplit(source_url)

    if link.path.startswith("/"):
        path = link.path
    else:
        base_path = source.path
        pos = base_path.rfind("/")
        if pos == -1:
            path = "/" + link.path
        else:
            path = base_path[: pos + 1] + link.path

    for component in (path, link.query, link.fragment):
        if _INVALID_COMPONENT_CHARS.search(component):
            raise LinkResolutionError(
                raw, source_url, f"invalid character in '{component}'"
            )

    resolved = urlunsplit((source.scheme, source.netloc, path, link.query, link.fragment))
    try:
        parse_http_url(resolved)
    except InvalidURLError as e:
        raise LinkResolutionError(raw, source_url, e.reason) from e

    return resolved
