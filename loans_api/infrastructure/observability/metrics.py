"""Prometheus metrics for loans API call latency and failure rates"""

from prometheus_client import Counter, Histogram

request_duration_histogram = Histogram(
    "loans_api_request_duration_seconds",
    "Loans API response time",
    ["method", "status"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

request_failure_counter = Counter(
    "loans_api_request_failures_total",
    "Failed loans API calls",
    ["kind"],  # rejected | unexpected_response | unauthorized | transport
)


def record_failure(kind: str) -> None:
    """Count a failed call by how it was classified"""
    request_failure_counter.labels(kind=kind).inc()
