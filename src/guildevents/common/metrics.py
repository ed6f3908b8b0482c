"""Prometheus metrics for bucket requests and synchronisation."""

from prometheus_client import Counter, Histogram

# === Counters ===

BUCKET_REQUESTS_TOTAL = Counter(
    "guildevents_bucket_requests_total",
    "Total signed bucket requests",
    ["method", "resource", "outcome"],  # outcome: success or a FailureReason value
)

SYNC_RESULTS_TOTAL = Counter(
    "guildevents_sync_results_total",
    "Resource synchronisation decisions",
    ["resource", "status"],  # status: updated, unchanged, skipped
)

# === Histograms ===

BUCKET_REQUEST_LATENCY = Histogram(
    "guildevents_bucket_request_latency_seconds",
    "Bucket request latency in seconds",
    ["method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)


# === Helper Functions ===


def record_bucket_request(
    method: str,
    resource: str,
    outcome: str,
    latency: float,
) -> None:
    """Record a bucket request with its outcome and latency."""
    BUCKET_REQUESTS_TOTAL.labels(
        method=method,
        resource=resource,
        outcome=outcome,
    ).inc()
    BUCKET_REQUEST_LATENCY.labels(method=method).observe(latency)


def record_sync_result(resource: str, status: str) -> None:
    """Record a synchronisation decision."""
    SYNC_RESULTS_TOTAL.labels(resource=resource, status=status).inc()
