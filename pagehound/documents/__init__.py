"""Document model and factory for pagehound."""

from pagehound.documents.document import (
    Document,
    DocumentKind,
    HtmlDocument,
    LinkKind,
    XmlDocument,
    sniff_charset,
    sniff_mime_type,
)
from pagehound.documents.factory import (
    DOCUMENT_TYPES,
    build_document,
    register_document_type,
)

__all__ = [
    "DOCUMENT_TYPES",
    "Document",
    "DocumentKind",
    "HtmlDocument",
    "LinkKind",
    "XmlDocument",
    "build_document",
    "register_document_type",
    "sniff_charset",
    "sniff_mime_type",
]
