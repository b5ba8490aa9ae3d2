"""Vector store module."""

from semsearch.vectorstore.models import (
    BatchInsertFailure,
    BatchInsertResult,
    Record,
    SearchResult,
)
from semsearch.vectorstore.service import (
    InMemoryVectorStore,
    QdrantVectorStore,
    VectorStore,
    create_vector_store,
)

__all__ = [
    "BatchInsertFailure",
    "BatchInsertResult",
    "InMemoryVectorStore",
    "QdrantVectorStore",
    "Record",
    "SearchResult",
    "VectorStore",
    "create_vector_store",
]
