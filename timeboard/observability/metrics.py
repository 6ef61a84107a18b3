"""Prometheus metrics for Timeboard.

Tracks request handling, the snapshot cache tiers, upstream health,
degraded responses, idempotent replays and timer auto-stops.
"""

from prometheus_client import Counter, Histogram

# Request metrics
REQUEST_COUNT = Counter(
    "timeboard_request_count_total",
    "Total number of requests processed",
    labelnames=["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "timeboard_request_latency_seconds",
    "Request latency in seconds",
    labelnames=["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Snapshot cache metrics
SNAPSHOT_CACHE_HITS = Counter(
    "timeboard_snapshot_cache_hits_total",
    "Snapshot cache hits by tier",
    labelnames=["tier"],
)

SNAPSHOT_CACHE_MISSES = Counter(
    "timeboard_snapshot_cache_misses_total",
    "Snapshot cache lookups that found nothing usable",
    labelnames=["mode"],
)

SNAPSHOT_STORE_ERRORS = Counter(
    "timeboard_snapshot_store_errors_total",
    "Durable snapshot store failures swallowed by the cache",
    labelnames=["operation"],
)

# Upstream metrics
UPSTREAM_CALLS = Counter(
    "timeboard_upstream_calls_total",
    "Upstream API calls by operation and outcome",
    labelnames=["operation", "outcome"],
)

UPSTREAM_LATENCY = Histogram(
    "timeboard_upstream_latency_seconds",
    "Upstream API call latency in seconds",
    labelnames=["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

DEGRADED_RESPONSES = Counter(
    "timeboard_degraded_responses_total",
    "Read responses served without fresh data",
    labelnames=["reason"],
)

COALESCED_REFRESHES = Counter(
    "timeboard_coalesced_refreshes_total",
    "Refreshes that joined an in-flight upstream call",
)

# Idempotency metrics
IDEMPOTENCY_REPLAYS = Counter(
    "timeboard_idempotency_replays_total",
    "Mutating requests answered from a stored result",
    labelnames=["scope"],
)

IDEMPOTENCY_STORE_ERRORS = Counter(
    "timeboard_idempotency_store_errors_total",
    "Idempotency store failures swallowed by the guard",
    labelnames=["operation"],
)

# Timer metrics
TIMERS_AUTO_STOPPED = Counter(
    "timeboard_timers_auto_stopped_total",
    "Running timers force-stopped for exceeding the maximum duration",
)
