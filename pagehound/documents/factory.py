"""
Document factory.

Turns a request/response pair into the document variant that matches the
response content type. The mapping is an exact, case-sensitive lookup on the
MIME type token; there is no wildcard or suffix matching, so types such as
application/xhtml+xml fall back to the generic document unless registered.
"""

from collections.abc import Callable, Mapping

from pagehound.documents.document import (
    Document,
    HtmlDocument,
    XmlDocument,
    sniff_mime_type,
)
from pagehound.models import HeaderValue, Request, Response

DocumentConstructor = Callable[[str, int, Mapping[str, HeaderValue], bytes], Document]

DOCUMENT_TYPES: dict[str, DocumentConstructor] = {
    "text/html": HtmlDocument,
    "text/xhtml": HtmlDocument,
    "text/xml": XmlDocument,
    "application/xml": XmlDocument,
}


def register_document_type(mime_type: str, constructor: DocumentConstructor) -> None:
    """
    Map a MIME type token to a document constructor.

    Args:
        mime_type: Exact MIME token, e.g. "application/xhtml+xml".
        constructor: Callable taking (url, status, headers, body).
    """
    DOCUMENT_TYPES[mime_type] = constructor


def build_document(request: Request, response: Response) -> Document:
    """
    Build the document for one HTTP exchange.

    Args:
        request: The request that was sent.
        response: The response received (possibly a synthetic failure).

    Returns:
        The variant registered for the response's MIME type, or a generic
        Document when the type is missing or unknown.
    """
    mime_type = sniff_mime_type(response.header("content-type"))
    constructor = DOCUMENT_TYPES.get(mime_type, Document)
    return constructor(request.url, response.status_code, response.headers, response.body)


__all__ = [
    "DOCUMENT_TYPES",
    "build_document",
    "register_document_type",
    "sniff_mime_type",
]
