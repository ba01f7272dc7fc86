"""Core crawl components: frontier queue, transport, context and engine."""

from pagehound.core.context import CrawlContext
from pagehound.core.engine import Engine, EngineConfig
from pagehound.core.queue import FrontierQueue
from pagehound.core.transport import HttpxTransport, Transport, TransportConfig

__all__ = [
    "CrawlContext",
    "Engine",
    "EngineConfig",
    "FrontierQueue",
    "HttpxTransport",
    "Transport",
    "TransportConfig",
]
