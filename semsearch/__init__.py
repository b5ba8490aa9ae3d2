"""Semantic search over remote text embeddings."""

__version__ = "0.1.0"
