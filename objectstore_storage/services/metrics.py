"""Prometheus metric definitions for storage operations."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

storage_operations_total = Counter(
    "storage_operations_total",
    "Total object store operations by outcome.",
    labelnames=["operation", "outcome"],
)

storage_operation_seconds = Histogram(
    "storage_operation_seconds",
    "Time spent waiting on the object store per operation.",
    labelnames=["operation"],
)

__all__ = [
    "storage_operations_total",
    "storage_operation_seconds",
]
