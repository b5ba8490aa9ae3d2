"""Embed-and-store orchestration."""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from semsearch.documents.loader import DocumentLoader, TextFileLoader
from semsearch.documents.models import Document
from semsearch.embeddings.service import EmbeddingService
from semsearch.exceptions import (
    DocumentError,
    PayloadTooLargeError,
    RateLimitedError,
    SemanticSearchError,
    TransportError,
)
from semsearch.logging_config import get_logger
from semsearch.retrieval.models import IndexFailure, IndexReport
from semsearch.vectorstore.service import VectorStore

logger = get_logger(__name__)

# Failures that only affect the document at hand; the run goes on
_PER_DOCUMENT_ERRORS = (PayloadTooLargeError, RateLimitedError, TransportError)

# (position, source, text, metadata)
_Item = tuple[int, str, str, dict[str, Any]]


class DocumentIndexer:
    """Embeds documents one at a time and stores the vectors.

    An oversized, rate-limited or unreachable-endpoint document is reported
    in the IndexReport and skipped; the remaining documents are still
    indexed. Credential errors abort the run.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        loader: DocumentLoader | None = None,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._loader = loader or TextFileLoader()

    async def index_texts(
        self,
        texts: Sequence[str],
        metadatas: Sequence[dict[str, Any]] | None = None,
    ) -> IndexReport:
        """Index raw strings.

        Args:
            texts: Texts to embed and store.
            metadatas: Per-text metadata. Defaults to a shared creation
                timestamp and the text's position.

        Returns:
            Ids of stored records and per-text failures.
        """
        if metadatas is not None and len(metadatas) != len(texts):
            raise ValueError("metadatas must have one entry per text")

        created_at = datetime.now(UTC).isoformat()
        items: list[_Item] = []
        for index, text in enumerate(texts):
            metadata = (
                dict(metadatas[index])
                if metadatas is not None
                else {"created_at": created_at, "index": index}
            )
            items.append((index, f"text[{index}]", text, metadata))

        return await self._index(items, total=len(texts))

    async def index_documents(self, documents: Sequence[Document]) -> IndexReport:
        """Index loaded documents, one record per document."""
        items: list[_Item] = [
            (index, doc.metadata.source, doc.content, doc.record_metadata(index))
            for index, doc in enumerate(documents)
        ]
        return await self._index(items, total=len(documents))

    async def index_files(self, paths: Iterable[str | Path]) -> IndexReport:
        """Load and index files; unreadable files are reported, not fatal."""
        items: list[_Item] = []
        failures: list[IndexFailure] = []
        total = 0

        for position, path in enumerate(paths):
            total += 1
            try:
                doc = self._loader.load(path)
            except DocumentError as e:
                logger.warning(f"Skipping {path}: {e.message}")
                failures.append(_failure(position, str(path), e))
                continue
            items.append(
                (position, doc.metadata.source, doc.content, doc.record_metadata(position))
            )

        return await self._index(items, total=total, failures=failures)

    async def _index(
        self,
        items: list[_Item],
        total: int,
        failures: list[IndexFailure] | None = None,
    ) -> IndexReport:
        report = IndexReport(failures=list(failures or []))
        embedded: list[tuple[str, list[float], dict[str, Any]]] = []
        origins: list[tuple[int, str]] = []

        for position, source, text, metadata in items:
            try:
                result = await self._embedding_service.embed(text)
            except _PER_DOCUMENT_ERRORS as e:
                logger.warning(
                    f"Could not embed {source}: {e.message}",
                    extra={"source": source, "code": e.code.value},
                )
                report.failures.append(_failure(position, source, e))
                continue

            embedded.append((text, result.embedding, metadata))
            origins.append((position, source))

        batch = await self._vector_store.insert_many(embedded)
        report.record_ids.extend(batch.inserted_ids)
        for failure in batch.failures:
            position, source = origins[failure.position]
            report.failures.append(
                IndexFailure(
                    position=position,
                    source=source,
                    code=failure.code,
                    message=failure.message,
                )
            )

        report.failures.sort(key=lambda f: f.position)
        logger.info(
            f"Indexed {report.indexed_count} of {total} documents",
            extra={"failures": len(report.failures)},
        )
        return report


def _failure(position: int, source: str, error: SemanticSearchError) -> IndexFailure:
    return IndexFailure(
        position=position,
        source=source,
        code=error.code.value,
        message=error.message,
        retry_after=getattr(error, "retry_after", None),
    )
