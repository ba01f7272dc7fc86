"""
XML log sink.

Writes the crawl record as a streaming XML document:

    <crawllog>
      <page microtime="...">
        <request microtime="..."><uri/><method/><referrer/><headers/></request>
        <response microtime="..."><status/><message/><headers/></response>
        <handlerInfo handler="..." microtime="..."><key>value</key></handlerInfo>
      </page>
    </crawllog>

Each page is built in memory and serialized with lxml when it ends, so the
records of one page always appear together.
"""

import re
import sys
import time
from collections.abc import Mapping
from typing import Any, TextIO

from lxml import etree

from pagehound.exceptions import LogSinkError
from pagehound.models import Request, Response
from pagehound.sinks.base import LogSink

ROOT_TAG = "crawllog"

_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")
_XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _microtime() -> str:
    return f"{time.time():.6f}"


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return _XML_INVALID_CHARS.sub("", str(value))


class XmlLogSink(LogSink):
    """Log sink writing an XML document to a file or stdout."""

    def __init__(self, target: str | TextIO = "-", append: bool = False, indent: str = "  "):
        """
        Open the XML log.

        Args:
            target: File path, "-" for stdout, or an open text stream.
            append: Append to an existing file instead of truncating it.
            indent: Indentation unit for pretty-printing.

        Raises:
            LogSinkError: If the target cannot be opened.
        """
        self.indent = indent
        self._owns_stream = False

        if target == "-":
            self._stream: TextIO = sys.stdout
        elif isinstance(target, str):
            try:
                self._stream = open(target, "a" if append else "w", encoding="utf-8")
            except OSError as e:
                raise LogSinkError(f"Unable to open XML log '{target}': {e}") from e
            self._owns_stream = True
        else:
            self._stream = target

        self._page: etree._Element | None = None
        self._closed = False
        self._write(f'<?xml version="1.0" encoding="UTF-8"?>\n<{ROOT_TAG}>\n')

    def _write(self, text: str) -> None:
        try:
            self._stream.write(text)
        except (OSError, ValueError) as e:
            raise LogSinkError(f"Unable to write XML log: {e}") from e

    def _current_page(self) -> etree._Element:
        return self._page if self._page is not None else self._open_page()

    def _append_headers(self, parent: etree._Element, items: list[tuple[str, str]]) -> None:
        headers = etree.SubElement(parent, "headers")
        for name, value in items:
            header = etree.SubElement(headers, "header", name=_text(name))
            header.text = _text(value)

    def _open_page(self) -> etree._Element:
        if self._page is not None:
            self.end_page()
        self._page = etree.Element("page", microtime=_microtime())
        return self._page

    def start_page(self) -> None:
        self._open_page()

    def log_request(self, request: Request) -> None:
        element = etree.SubElement(self._current_page(), "request", microtime=_microtime())
        etree.SubElement(element, "uri").text = _text(request.url)
        etree.SubElement(element, "method").text = request.method
        etree.SubElement(element, "referrer").text = _text(request.referrer or "")
        self._append_headers(element, list(request.headers.items()))

    def log_response(self, response: Response) -> None:
        element = etree.SubElement(self._current_page(), "response", microtime=_microtime())
        etree.SubElement(element, "status").text = str(response.status_code)
        etree.SubElement(element, "message").text = _text(response.reason)
        self._append_headers(element, response.header_items())

    def log_handler_info(self, handler: str, info: Mapping[str, Any]) -> None:
        element = etree.SubElement(
            self._current_page(),
            "handlerInfo",
            handler=_text(handler),
            microtime=_microtime(),
        )
        for key, value in info.items():
            key = str(key)
            if _XML_NAME.match(key) and not key.lower().startswith("xml"):
                child = etree.SubElement(element, key)
            else:
                child = etree.SubElement(element, "field", name=_text(key))
            child.text = _text(value)

    def end_page(self) -> None:
        if self._page is None:
            return

        page, self._page = self._page, None
        if self.indent:
            etree.indent(page, space=self.indent, level=1)
        markup = etree.tostring(page, encoding="unicode")
        self._write(f"{self.indent}{markup}\n")
        self._stream.flush()

    def close(self) -> None:
        """End the document and close the file if this sink opened it."""
        if self._closed:
            return

        self.end_page()
        self._write(f"</{ROOT_TAG}>\n")
        self._closed = True
        if self._owns_stream:
            self._stream.close()
        else:
            self._stream.flush()
