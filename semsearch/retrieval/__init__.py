"""Indexing and retrieval module."""

from semsearch.retrieval.indexer import DocumentIndexer
from semsearch.retrieval.models import IndexFailure, IndexReport, RetrievalResult
from semsearch.retrieval.retriever import Retriever, SemanticRetriever

__all__ = [
    "DocumentIndexer",
    "IndexFailure",
    "IndexReport",
    "Retriever",
    "RetrievalResult",
    "SemanticRetriever",
]
