"""Embedding service module."""

from semsearch.embeddings.models import EmbeddingResult
from semsearch.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "HTTPEmbeddingService",
]
