"""Retriever interface and implementations."""

from abc import ABC, abstractmethod

from semsearch.embeddings.service import EmbeddingService
from semsearch.exceptions import ErrorCode, RetrievalError, SemanticSearchError
from semsearch.logging_config import get_logger
from semsearch.retrieval.models import RetrievalResult
from semsearch.vectorstore.service import VectorStore

logger = get_logger(__name__)


class Retriever(ABC):
    """Abstract base class for retrievers."""

    @abstractmethod
    async def retrieve(
        self,
        query: str,
        top_k: int = 3,
    ) -> list[RetrievalResult]:
        """Retrieve relevant documents for a query.

        Args:
            query: The search query.
            top_k: Maximum number of results to return.

        Returns:
            List of retrieval results ordered by relevance.

        Raises:
            RetrievalError: If retrieval fails.
        """
        ...


class SemanticRetriever(Retriever):
    """Semantic search retriever using embeddings and vector store.

    Embeds the query and ranks stored records by cosine similarity to it.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        score_threshold: float | None = None,
    ) -> None:
        """Initialize the semantic retriever.

        Args:
            embedding_service: Service for generating embeddings.
            vector_store: Store holding the indexed records.
            score_threshold: Drop results scoring below this, if set.
        """
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._score_threshold = score_threshold

    async def retrieve(
        self,
        query: str,
        top_k: int = 3,
    ) -> list[RetrievalResult]:
        """Retrieve documents using semantic similarity.

        Args:
            query: The search query.
            top_k: Maximum number of results.

        Returns:
            List of relevant results, best first.

        Raises:
            InvalidKError: If top_k is not positive.
            EmbeddingError: If the query cannot be embedded (rate limit,
                auth, transport); passed through unchanged.
            RetrievalError: On any other failure.
        """
        if not query.strip():
            return []

        try:
            embedding_result = await self._embedding_service.embed(query)
            search_results = await self._vector_store.query(
                embedding_result.embedding,
                k=top_k,
            )
        except SemanticSearchError:
            raise
        except Exception as e:
            logger.error(f"Retrieval failed: {e}")
            raise RetrievalError(
                f"Failed to retrieve documents: {e}",
                code=ErrorCode.RETRIEVAL_ERROR,
                details={"query": query[:100], "error": str(e)},
            ) from e

        results: list[RetrievalResult] = []
        for sr in search_results:
            if self._score_threshold is not None and sr.score < self._score_threshold:
                continue

            record = sr.record
            results.append(
                RetrievalResult(
                    record_id=record.id,
                    content=record.text,
                    score=sr.score,
                    source=str(record.metadata.get("source", record.id)),
                    metadata=record.metadata,
                )
            )

        logger.debug(
            f"Retrieved {len(results)} results for query",
            extra={
                "query_length": len(query),
                "top_k": top_k,
                "results_count": len(results),
            },
        )

        return results
