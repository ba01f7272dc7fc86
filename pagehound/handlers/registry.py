"""
Handler registry.

Maps handler type names, as used in crawl files and on the command line,
to handler classes.
"""

from collections.abc import Mapping
from typing import Any

from pagehound.exceptions import UnsupportedTypeError
from pagehound.handlers.base import Handler
from pagehound.handlers.link_appender import LinkAppender
from pagehound.handlers.matching import RegexMatch, StringMatch
from pagehound.handlers.status_log import StatusLog
from pagehound.handlers.xpath import NotXPath, XPath

HANDLER_TYPES: dict[str, type[Handler]] = {}


def register_handler(handler_class: type[Handler]) -> type[Handler]:
    """
    Register a handler class under its type_name (case-insensitive).

    Can be used as a class decorator.
    """
    HANDLER_TYPES[handler_class.type_name.lower()] = handler_class
    return handler_class


for _handler_class in (StringMatch, RegexMatch, XPath, NotXPath, LinkAppender, StatusLog):
    register_handler(_handler_class)


def create_handler(
    type_name: str,
    name: str | None = None,
    options: Mapping[str, Any] | None = None,
) -> Handler:
    """
    Create a handler by type name.

    Args:
        type_name: Registered type, e.g. "LinkAppender" or "stringmatch".
        name: Name used to attribute the handler's records.
        options: Handler options.

    Returns:
        The configured handler.

    Raises:
        UnsupportedTypeError: If the type is not registered.
        ConfigurationError: If an option is unknown or invalid.
    """
    handler_class = HANDLER_TYPES.get(str(type_name).lower())
    if handler_class is None:
        raise UnsupportedTypeError("handler", str(type_name))
    return handler_class.from_options(name, options)
