"""Prometheus metrics for AI proxy traffic, quota gating and HTTP latency"""

from prometheus_client import Counter, Histogram

# AI proxy metrics
ai_request_counter = Counter(
    "spendio_ai_requests_total",
    "AI requests proxied to the chat-completion API",
    ["endpoint", "outcome"],  # chat | health_score, ok | error
)

ai_upstream_latency_histogram = Histogram(
    "ai_upstream_latency_seconds",
    "Chat-completion API response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

ai_upstream_failure_counter = Counter(
    "ai_upstream_failures_total",
    "Failed chat-completion API calls",
    ["reason"],  # not_configured | auth | rate_limited | upstream | invalid_response | timeout
)

# Quota metrics
quota_denial_counter = Counter(
    "spendio_quota_denials_total",
    "Transactions rejected by the free plan quota",
    ["category"],
)

transactions_created_counter = Counter(
    "spendio_transactions_created_total",
    "Transactions recorded",
    ["type"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ai_request(endpoint: str, ok: bool) -> None:
    ai_request_counter.labels(endpoint=endpoint, outcome="ok" if ok else "error").inc()
