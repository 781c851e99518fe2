"""Prometheus metrics for the item service.

All metrics live in the default registry and are exposed at ``/metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ──────────────────────────────────────────────────────────────
# HTTP
# ──────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

errors_total = Counter(
    "errors_total",
    "Problem responses returned, by error type",
    ["error_type", "status_code"],
)

# ──────────────────────────────────────────────────────────────
# Outbox
# ──────────────────────────────────────────────────────────────

outbox_messages_published_total = Counter(
    "outbox_messages_published_total",
    "Outbox messages successfully published",
    ["event_type"],
)

outbox_messages_failed_total = Counter(
    "outbox_messages_failed_total",
    "Outbox publish attempts that failed",
    ["event_type"],
)

outbox_messages_parked_total = Counter(
    "outbox_messages_parked_total",
    "Outbox messages that exhausted their attempts",
    ["event_type"],
)

outbox_cycle_errors_total = Counter(
    "outbox_cycle_errors_total",
    "Processor cycles aborted by a store error",
)

outbox_batch_size = Histogram(
    "outbox_batch_size",
    "Rows fetched per processor cycle",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250),
)

outbox_pending_messages = Gauge(
    "outbox_pending_messages",
    "Pending outbox rows after the last cycle",
)

# ──────────────────────────────────────────────────────────────
# Cache
# ──────────────────────────────────────────────────────────────

cache_hits_total = Counter(
    "cache_hits_total",
    "Cache hits",
    ["cache_name"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Cache misses",
    ["cache_name"],
)

cache_errors_total = Counter(
    "cache_errors_total",
    "Cache operations that failed and were bypassed",
    ["cache_name", "operation"],
)

cache_operation_duration_seconds = Histogram(
    "cache_operation_duration_seconds",
    "Cache operation latency in seconds",
    ["operation", "cache_name"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5),
)

cache_invalidations_total = Counter(
    "cache_invalidations_total",
    "Keys removed by pattern invalidation",
    ["pattern"],
)
