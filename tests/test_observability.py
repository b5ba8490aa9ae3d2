"""Tests for observability module."""

from prometheus_client import REGISTRY

from semsearch.observability.metrics import (
    get_metrics,
    track_embedding_request,
    track_search_request,
    update_store_size,
)


class TestMetricsFunctions:
    """Tests for metrics tracking functions."""

    def test_get_metrics_returns_bytes(self) -> None:
        """get_metrics returns bytes."""
        assert isinstance(get_metrics(), bytes)

    def test_track_embedding_request(self) -> None:
        """Embedding requests are counted per status."""
        labels = {"model": "obs-model", "status": "embedding_rate_limited"}
        before = REGISTRY.get_sample_value("embedding_requests_total", labels) or 0.0

        track_embedding_request(
            model="obs-model",
            duration=0.2,
            batch_size=4,
            status="embedding_rate_limited",
        )

        assert REGISTRY.get_sample_value("embedding_requests_total", labels) == before + 1
        assert "embedding_request_duration_seconds" in get_metrics().decode()

    def test_track_search_request(self) -> None:
        """Search metrics are recorded."""
        before = REGISTRY.get_sample_value("search_results_returned_count") or 0.0

        track_search_request(backend="memory", duration=0.001, results_returned=3, top_score=0.9)

        assert REGISTRY.get_sample_value("search_results_returned_count") == before + 1

    def test_track_search_without_results(self) -> None:
        """An empty result does not record a top score."""
        before = REGISTRY.get_sample_value("search_top_score_count") or 0.0

        track_search_request(backend="memory", duration=0.001, results_returned=0, top_score=None)

        assert (REGISTRY.get_sample_value("search_top_score_count") or 0.0) == before

    def test_update_store_size(self) -> None:
        """Store size gauge follows the latest value."""
        update_store_size("test-backend", 7)
        assert REGISTRY.get_sample_value("vectorstore_records", {"backend": "test-backend"}) == 7
