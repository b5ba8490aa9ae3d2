"""Vector store interface, exact in-memory store and Qdrant implementation."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import uuid4

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from semsearch.config import QdrantSettings, get_settings
from semsearch.exceptions import (
    DimensionMismatchError,
    ErrorCode,
    InvalidKError,
    VectorStoreError,
)
from semsearch.logging_config import get_logger
from semsearch.observability.metrics import track_search_request, update_store_size
from semsearch.similarity import cosine_similarity
from semsearch.vectorstore.models import (
    BatchInsertFailure,
    BatchInsertResult,
    Record,
    SearchResult,
)

logger = get_logger(__name__)

BatchItem = tuple[str, Sequence[float], dict[str, Any] | None]


class VectorStore(ABC):
    """Abstract base class for vector stores.

    A store holds records of one fixed dimension, established by the first
    insert, and answers k-nearest-neighbour queries by cosine similarity.
    """

    backend: str = "abstract"

    def __init__(self) -> None:
        self._dimensions: int | None = None
        self._lock = asyncio.Lock()

    @property
    def dimensions(self) -> int | None:
        """Vector dimension of this store, None until the first insert."""
        return self._dimensions

    def _check_vector(self, vector: Sequence[float]) -> None:
        """Reject vectors that cannot join this store."""
        if not vector:
            raise DimensionMismatchError(
                expected=self._dimensions or 0,
                actual=0,
                message="Cannot store an empty vector",
            )
        if self._dimensions is not None and len(vector) != self._dimensions:
            raise DimensionMismatchError(expected=self._dimensions, actual=len(vector))

    @abstractmethod
    async def insert(
        self,
        text: str,
        vector: Sequence[float],
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Append a record.

        Args:
            text: Text the vector was computed from.
            vector: Embedding vector.
            metadata: Optional metadata stored with the record.

        Returns:
            Identifier of the new record.

        Raises:
            DimensionMismatchError: If the vector does not match the store's
                dimension. The store is left unchanged.
            VectorStoreError: If the backend fails.
        """
        ...

    async def insert_many(self, items: Iterable[BatchItem]) -> BatchInsertResult:
        """Insert (text, vector, metadata) items one after another.

        Not transactional: a rejected item is logged and reported, items
        before and after it are kept.

        Args:
            items: Items to insert.

        Returns:
            Inserted ids and per-item failures.
        """
        result = BatchInsertResult()
        for position, (text, vector, metadata) in enumerate(items):
            try:
                record_id = await self.insert(text, vector, metadata)
            except VectorStoreError as e:
                logger.warning(
                    f"Batch item {position} rejected: {e.message}",
                    extra={"position": position, "code": e.code.value},
                )
                result.failures.append(
                    BatchInsertFailure(
                        position=position,
                        code=e.code.value,
                        message=e.message,
                    )
                )
                continue
            result.inserted_ids.append(record_id)

        return result

    @abstractmethod
    async def query(self, vector: Sequence[float], k: int) -> list[SearchResult]:
        """Return the k records most similar to a vector.

        Args:
            vector: Query vector.
            k: Maximum number of results.

        Returns:
            Results sorted by descending score, ties in insertion order.
            An empty store yields an empty list.

        Raises:
            InvalidKError: If k is not positive.
            DimensionMismatchError: If the query vector has the wrong length.
        """
        ...

    @abstractmethod
    async def size(self) -> int:
        """Number of stored records."""
        ...

    @abstractmethod
    async def records(self) -> list[Record]:
        """All records in insertion order."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None


class InMemoryVectorStore(VectorStore):
    """Exact-search store kept in a Python list.

    Every query scores every record, O(N * D). That is fine for the tens to
    low hundreds of records this tool indexes; there is no index structure,
    so it does not scale to large corpora.
    """

    backend = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._records: list[Record] = []

    async def insert(
        self,
        text: str,
        vector: Sequence[float],
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Append a record to the list."""
        async with self._lock:
            self._check_vector(vector)
            record = Record(
                id=str(uuid4()),
                text=text,
                vector=tuple(float(x) for x in vector),
                metadata=dict(metadata or {}),
            )
            self._records.append(record)
            if self._dimensions is None:
                self._dimensions = len(record.vector)
                logger.debug(f"Store dimension fixed at {self._dimensions}")

        update_store_size(self.backend, len(self._records))
        return record.id

    async def query(self, vector: Sequence[float], k: int) -> list[SearchResult]:
        """Score every record against the vector and keep the best k."""
        if k <= 0:
            raise InvalidKError(k)

        # Inserts only ever append, so a shallow copy is a consistent snapshot
        snapshot = list(self._records)
        if not snapshot:
            return []

        if self._dimensions is not None and len(vector) != self._dimensions:
            raise DimensionMismatchError(expected=self._dimensions, actual=len(vector))

        start_time = time.perf_counter()
        scored = [(cosine_similarity(vector, record.vector), record) for record in snapshot]
        # sort() is stable, so equal scores stay in insertion order
        scored.sort(key=lambda pair: pair[0], reverse=True)
        results = [SearchResult(record=record, score=score) for score, record in scored[:k]]

        track_search_request(
            backend=self.backend,
            duration=time.perf_counter() - start_time,
            results_returned=len(results),
            top_score=results[0].score if results else None,
        )
        return results

    async def size(self) -> int:
        """Count of stored records."""
        return len(self._records)

    async def records(self) -> list[Record]:
        """Snapshot of the records in insertion order."""
        return list(self._records)


class QdrantVectorStore(VectorStore):
    """Qdrant-backed store following the InMemoryVectorStore contract.

    The collection is (re)created on the first insert of a run, since nothing
    persists between runs. Qdrant normalises vectors stored under cosine
    distance, so records read back carry unit-length vectors.

    Ties are put back in insertion order only among the k points Qdrant
    returns. When equal scores straddle the k-th place, Qdrant picks which
    of them make the cut, so a later-inserted record can displace an
    earlier one with the same score. InMemoryVectorStore has no such gap.
    """

    backend = "qdrant"

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        super().__init__()
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None
        self._collection = self._settings.collection_name
        self._next_position = 0

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            if self._settings.url == ":memory:":
                self._client = AsyncQdrantClient(location=":memory:")
            else:
                api_key = None
                if self._settings.api_key:
                    api_key = self._settings.api_key.get_secret_value()

                self._client = AsyncQdrantClient(
                    url=self._settings.url,
                    api_key=api_key,
                )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def _create_collection(
        self,
        client: AsyncQdrantClient,
        dimensions: int,
    ) -> None:
        """Create the collection, dropping any left over from an earlier run."""
        if await client.collection_exists(self._collection):
            await client.delete_collection(self._collection)
            logger.info(f"Dropped stale collection: {self._collection}")

        await client.create_collection(
            collection_name=self._collection,
            vectors_config=VectorParams(
                size=dimensions,
                distance=Distance.COSINE,
            ),
        )
        logger.info(
            f"Created collection: {self._collection}",
            extra={"dimensions": dimensions},
        )

    def _to_record(self, point: Any) -> Record:
        payload = dict(point.payload) if point.payload else {}
        vector = point.vector if isinstance(point.vector, list) else []
        return Record(
            id=str(point.id),
            text=payload.get("text", ""),
            vector=tuple(vector),
            metadata=payload.get("metadata") or {},
        )

    async def insert(
        self,
        text: str,
        vector: Sequence[float],
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Upsert a single point into the collection."""
        async with self._lock:
            self._check_vector(vector)
            client = await self._get_client()
            record_id = str(uuid4())

            try:
                if self._dimensions is None:
                    await self._create_collection(client, len(vector))

                await client.upsert(
                    collection_name=self._collection,
                    points=[
                        PointStruct(
                            id=record_id,
                            vector=[float(x) for x in vector],
                            payload={
                                "text": text,
                                "metadata": dict(metadata or {}),
                                "position": self._next_position,
                            },
                        )
                    ],
                )
            except Exception as e:
                raise VectorStoreError(
                    f"Failed to insert record: {e}",
                    code=ErrorCode.VECTOR_STORE_ERROR,
                    details={"collection": self._collection, "error": str(e)},
                ) from e

            if self._dimensions is None:
                self._dimensions = len(vector)
            self._next_position += 1

        update_store_size(self.backend, self._next_position)
        return record_id

    async def query(self, vector: Sequence[float], k: int) -> list[SearchResult]:
        """Query the collection and re-apply the insertion-order tie-break."""
        if k <= 0:
            raise InvalidKError(k)

        if self._dimensions is None:
            return []

        if len(vector) != self._dimensions:
            raise DimensionMismatchError(expected=self._dimensions, actual=len(vector))

        client = await self._get_client()
        start_time = time.perf_counter()

        try:
            response = await client.query_points(
                collection_name=self._collection,
                query=[float(x) for x in vector],
                limit=k,
                with_payload=True,
                with_vectors=True,
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to search: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": self._collection, "error": str(e)},
            ) from e

        points = sorted(
            response.points,
            key=lambda p: (
                -(p.score if p.score is not None else 0.0),
                (p.payload or {}).get("position", 0),
            ),
        )
        results = [
            SearchResult(
                record=self._to_record(point),
                score=max(-1.0, min(1.0, point.score or 0.0)),
            )
            for point in points
        ]

        track_search_request(
            backend=self.backend,
            duration=time.perf_counter() - start_time,
            results_returned=len(results),
            top_score=results[0].score if results else None,
        )
        return results

    async def size(self) -> int:
        """Exact point count of the collection."""
        if self._dimensions is None:
            return 0

        client = await self._get_client()
        try:
            result = await client.count(collection_name=self._collection, exact=True)
        except Exception as e:
            raise VectorStoreError(
                f"Failed to count records: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": self._collection, "error": str(e)},
            ) from e
        return result.count

    async def records(self) -> list[Record]:
        """Scroll through the whole collection, ordered by insertion."""
        if self._dimensions is None:
            return []

        client = await self._get_client()
        points: list[Any] = []
        offset = None

        try:
            while True:
                batch, offset = await client.scroll(
                    collection_name=self._collection,
                    limit=256,
                    offset=offset,
                    with_payload=True,
                    with_vectors=True,
                )
                points.extend(batch)
                if offset is None:
                    break
        except Exception as e:
            raise VectorStoreError(
                f"Failed to scroll records: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": self._collection, "error": str(e)},
            ) from e

        points.sort(key=lambda p: (p.payload or {}).get("position", 0))
        return [self._to_record(point) for point in points]


def create_vector_store(backend: str | None = None) -> VectorStore:
    """Build the configured vector store.

    Args:
        backend: "memory" or "qdrant"; defaults to SEARCH_BACKEND.

    Returns:
        A new, empty store.
    """
    name = backend or get_settings().search.backend.value
    if name == "memory":
        return InMemoryVectorStore()
    if name == "qdrant":
        return QdrantVectorStore()
    raise VectorStoreError(
        f"Unknown vector store backend: {name}",
        details={"backend": name},
    )
