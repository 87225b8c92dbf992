"""
Cache Metrics

Prometheus counters mirroring the in-process cache statistics.
"""

from prometheus_client import Counter

CACHE_OPERATIONS = Counter(
    "hello_directory_cache_operations_total",
    "Cache store operations by namespace, operation and result",
    ["namespace", "operation", "result"],
)


def record_cache_operation(namespace: str, operation: str, result: str) -> None:
    """Increment the Prometheus counter for one cache operation."""
    CACHE_OPERATIONS.labels(
        namespace=namespace, operation=operation, result=result
    ).inc()
