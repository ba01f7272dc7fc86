"""
Prometheus metrics for pagehound.

Provides instrumentation for monitoring crawl health and progress.
"""

from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# Fetch Metrics
# =============================================================================

REQUESTS_TOTAL = Counter(
    "pagehound_requests_total",
    "Total number of HTTP requests performed",
    ["method", "status_code"],
)

FETCH_DURATION = Histogram(
    "pagehound_fetch_duration_seconds",
    "Fetch operation duration",
    ["host"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

FETCH_CONTENT_SIZE = Histogram(
    "pagehound_fetch_content_size_bytes",
    "Size of fetched content",
    ["host"],
    buckets=[1024, 10240, 102400, 1048576, 10485760],  # 1KB to 10MB
)

TRANSPORT_ERRORS = Counter(
    "pagehound_transport_errors_total",
    "Requests that failed at the transport level",
    ["host"],
)

# =============================================================================
# Handler Metrics
# =============================================================================

HANDLER_CALLS = Counter(
    "pagehound_handler_calls_total",
    "Handler dispatches by outcome",
    ["handler", "outcome"],
)

# =============================================================================
# Frontier Metrics
# =============================================================================

LINKS_ENQUEUED = Counter(
    "pagehound_links_enqueued_total",
    "Newly discovered URLs added to the frontier",
    ["host"],
)

QUEUE_SIZE = Gauge(
    "pagehound_queue_size",
    "Number of requests pending in the frontier",
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_fetch(
    host: str,
    method: str,
    status_code: int,
    duration_seconds: float,
    content_size: int,
) -> None:
    """Record metrics for a completed HTTP exchange."""
    REQUESTS_TOTAL.labels(method=method, status_code=str(status_code)).inc()
    FETCH_DURATION.labels(host=host).observe(duration_seconds)
    FETCH_CONTENT_SIZE.labels(host=host).observe(content_size)


def record_transport_error(host: str, method: str) -> None:
    """Record a request that produced no response."""
    TRANSPORT_ERRORS.labels(host=host).inc()
    REQUESTS_TOTAL.labels(method=method, status_code="0").inc()


def record_handler_call(handler: str, called: bool) -> None:
    """Record whether a handler's filter let a document through."""
    HANDLER_CALLS.labels(handler=handler, outcome="handled" if called else "skipped").inc()


def record_link_enqueued(host: str) -> None:
    """Record a URL added to the frontier by link discovery."""
    LINKS_ENQUEUED.labels(host=host).inc()


def update_queue_size(size: int) -> None:
    """Update the frontier size gauge."""
    QUEUE_SIZE.set(size)
