"""
pagehound

A pluggable web crawler: starting from a seed URL it fetches pages one at a
time, classifies them by content type, discovers links and passes every
document through a chain of handlers that write structured crawl records.
"""

__version__ = "0.1.0"

from pagehound.config import CrawlerSettings, build_engine, load_crawl_file, load_settings
from pagehound.core.engine import Engine, EngineConfig
from pagehound.exceptions import CrawlerError
from pagehound.models import Request, Response

__all__ = [
    "CrawlerError",
    "CrawlerSettings",
    "Engine",
    "EngineConfig",
    "Request",
    "Response",
    "build_engine",
    "load_crawl_file",
    "load_settings",
]
