"""Prometheus metrics for semantic search.

Provides metrics instrumentation for:
- Embedding request latency, counts and batch sizes
- Search latency, result counts and top scores
- Vector store size and degenerate (zero-norm) comparisons
"""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

from semsearch.logging_config import get_logger

logger = get_logger(__name__)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 2, 4, 8, 16, 32, 64, 128],
)

# Search Metrics
SEARCH_QUERY_DURATION = Histogram(
    "search_query_duration_seconds",
    "Vector store query duration in seconds",
    ["backend"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

SEARCH_RESULTS_RETURNED = Histogram(
    "search_results_returned",
    "Number of results returned per query",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

SEARCH_TOP_SCORE = Histogram(
    "search_top_score",
    "Top similarity score per query",
    buckets=[-0.5, 0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Vector Store Metrics
VECTORSTORE_RECORDS = Gauge(
    "vectorstore_records",
    "Records currently held by the vector store",
    ["backend"],
)

ZERO_NORM_COMPARISONS = Counter(
    "zero_norm_comparisons_total",
    "Cosine comparisons involving a zero-length vector (scored as 0)",
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def start_metrics_server(port: int) -> None:
    """Expose metrics over HTTP on a background thread.

    Args:
        port: TCP port to listen on.
    """
    start_http_server(port)
    logger.info(f"Metrics exporter listening on :{port}")


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    status: str = "success",
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        status: Outcome label (success, rate_limited, error, ...).
    """
    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)


def track_search_request(
    backend: str,
    duration: float,
    results_returned: int,
    top_score: float | None,
) -> None:
    """Track vector store query metrics.

    Args:
        backend: Store backend name.
        duration: Query duration in seconds.
        results_returned: Number of results returned.
        top_score: Highest similarity score, None for an empty result.
    """
    SEARCH_QUERY_DURATION.labels(backend=backend).observe(duration)
    SEARCH_RESULTS_RETURNED.observe(results_returned)
    if top_score is not None:
        SEARCH_TOP_SCORE.observe(top_score)


def update_store_size(backend: str, size: int) -> None:
    """Set the record gauge for a backend."""
    VECTORSTORE_RECORDS.labels(backend=backend).set(size)


def track_zero_norm_comparison() -> None:
    """Count a cosine comparison that hit a zero vector."""
    ZERO_NORM_COMPARISONS.inc()
