"""Observability module for metrics and monitoring."""

from semsearch.observability.metrics import (
    get_metrics,
    start_metrics_server,
    track_embedding_request,
    track_search_request,
    track_zero_norm_comparison,
    update_store_size,
)

__all__ = [
    "get_metrics",
    "start_metrics_server",
    "track_embedding_request",
    "track_search_request",
    "track_zero_norm_comparison",
    "update_store_size",
]
