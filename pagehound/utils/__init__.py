"""Utility modules for pagehound."""

from pagehound.utils.logging import CrawlerLogger, get_logger, setup_logging
from pagehound.utils.url_utils import (
    get_host,
    host_matches_domain,
    is_valid_url,
    parse_http_url,
    resolve_link,
    split_link,
)

__all__ = [
    "CrawlerLogger",
    "get_host",
    "get_logger",
    "host_matches_domain",
    "is_valid_url",
    "parse_http_url",
    "resolve_link",
    "setup_logging",
    "split_link",
]
