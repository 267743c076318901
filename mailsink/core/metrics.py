"""
Prometheus Metrics

Defines application metrics for monitoring:
- Request counters
- Duration histograms
- Store gauges
- SMTP counters
"""

from prometheus_client import Counter, Histogram, Gauge, Info

from mailsink import __version__


# ===================================
# HTTP Metrics
# ===================================

requests_total = Counter(
    "mailsink_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
)

requests_duration = Histogram(
    "mailsink_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


# ===================================
# Store Metrics
# ===================================

messages_stored = Gauge(
    "mailsink_messages_stored",
    "Number of messages currently stored",
)

messages_evicted_total = Counter(
    "mailsink_messages_evicted_total",
    "Total number of messages evicted to honour the capacity",
)

store_clears_total = Counter(
    "mailsink_store_clears_total",
    "Total number of full store clears",
)


# ===================================
# SMTP Metrics
# ===================================

smtp_messages_received = Counter(
    "mailsink_smtp_messages_received",
    "Total number of messages received via SMTP",
    ["status"],  # accepted, error
)

smtp_messages_rejected = Counter(
    "mailsink_smtp_messages_rejected",
    "Total number of rejected SMTP transactions",
    ["reason"],  # sender_not_allowed, decode_error
)

smtp_logins_total = Counter(
    "mailsink_smtp_logins_total",
    "Total number of SMTP AUTH logins",
)

smtp_processing_duration = Histogram(
    "mailsink_smtp_processing_duration_seconds",
    "SMTP message processing duration in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)


# ===================================
# Application Info
# ===================================

app_info = Info(
    "mailsink_app",
    "Application information",
)

app_info.info({
    "version": __version__,
    "name": "MailSink",
})


# ===================================
# Helper Functions
# ===================================

def record_request(method: str, endpoint: str, status: int, duration: float):
    """
    Record HTTP request metrics.

    Args:
        method: HTTP method
        endpoint: Endpoint path
        status: HTTP status code
        duration: Request duration in seconds
    """
    requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    requests_duration.labels(method=method, endpoint=endpoint).observe(duration)


def record_store_size(size: int):
    """Record the current number of stored messages."""
    messages_stored.set(size)


def record_evictions(count: int):
    """Record evicted messages."""
    if count:
        messages_evicted_total.inc(count)


def record_store_cleared():
    """Record a full store clear."""
    store_clears_total.inc()
    messages_stored.set(0)


def record_smtp_message(status: str, duration: float):
    """
    Record SMTP message processing.

    Args:
        status: accepted or error
        duration: Processing duration in seconds
    """
    smtp_messages_received.labels(status=status).inc()
    smtp_processing_duration.observe(duration)


def record_smtp_rejection(reason: str):
    """Record a rejected SMTP transaction."""
    smtp_messages_rejected.labels(reason=reason).inc()


def record_smtp_login():
    """Record an SMTP AUTH login."""
    smtp_logins_total.inc()
