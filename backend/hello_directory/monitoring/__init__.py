"""
Monitoring Module

Prometheus metrics for the cache layer.
"""

from .cache_metrics import CACHE_OPERATIONS, record_cache_operation

__all__ = ["CACHE_OPERATIONS", "record_cache_operation"]
