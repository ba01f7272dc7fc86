"""Document handlers for pagehound."""

from pagehound.handlers.base import Handler
from pagehound.handlers.link_appender import LinkAppender
from pagehound.handlers.matching import RegexMatch, StringMatch
from pagehound.handlers.registry import HANDLER_TYPES, create_handler, register_handler
from pagehound.handlers.status_log import StatusLog
from pagehound.handlers.xpath import NotXPath, XPath

__all__ = [
    "HANDLER_TYPES",
    "Handler",
    "LinkAppender",
    "NotXPath",
    "RegexMatch",
    "StatusLog",
    "StringMatch",
    "XPath",
    "create_handler",
    "register_handler",
]
