"""Tests for the document indexer."""

from pathlib import Path

import pytest

from semsearch.embeddings.models import EmbeddingResult
from semsearch.embeddings.service import EmbeddingService
from semsearch.exceptions import (
    AuthError,
    EmbeddingError,
    ErrorCode,
    PayloadTooLargeError,
    RateLimitedError,
    TransportError,
)
from semsearch.retrieval.indexer import DocumentIndexer
from semsearch.vectorstore.service import InMemoryVectorStore


class ScriptedEmbeddingService(EmbeddingService):
    """Returns a vector per text, or raises the error mapped to it."""

    def __init__(self, outcomes: dict[str, list[float] | EmbeddingError]) -> None:
        self._outcomes = outcomes

    async def embed(self, text: str) -> EmbeddingResult:
        outcome = self._outcomes[text]
        if isinstance(outcome, EmbeddingError):
            raise outcome
        return EmbeddingResult.from_vector(text, outcome, self.model_name)

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        return [await self.embed(text) for text in texts]

    @property
    def model_name(self) -> str:
        return "scripted"

    @property
    def dimensions(self) -> int:
        return 2


class TestDocumentIndexer:
    """Tests for DocumentIndexer."""

    @pytest.mark.asyncio
    async def test_index_demo_sentences(self, scenario_embeddings, memory_store) -> None:
        """Texts are stored in order with timestamp and index metadata."""
        indexer = DocumentIndexer(scenario_embeddings, memory_store)
        texts = [
            "The canine barked loudly.",
            "The dog made a noise.",
            "The electron spins rapidly.",
        ]

        report = await indexer.index_texts(texts)

        assert report.indexed_count == 3
        assert report.failures == []
        records = await memory_store.records()
        assert [r.text for r in records] == texts
        assert [r.metadata["index"] for r in records] == [0, 1, 2]
        assert len({r.metadata["created_at"] for r in records}) == 1

    @pytest.mark.asyncio
    async def test_index_texts_custom_metadata(self, scenario_embeddings, memory_store) -> None:
        """Caller metadata replaces the defaults."""
        indexer = DocumentIndexer(scenario_embeddings, memory_store)

        await indexer.index_texts(["The dog made a noise."], [{"topic": "animals"}])

        records = await memory_store.records()
        assert records[0].metadata == {"topic": "animals"}

    @pytest.mark.asyncio
    async def test_metadata_length_mismatch(self, scenario_embeddings, memory_store) -> None:
        """metadatas must line up with texts."""
        indexer = DocumentIndexer(scenario_embeddings, memory_store)

        with pytest.raises(ValueError):
            await indexer.index_texts(["The dog made a noise."], [])

    @pytest.mark.asyncio
    async def test_per_document_failures_do_not_abort(self, memory_store) -> None:
        """Oversized, rate-limited and unreachable documents are skipped and reported."""
        service = ScriptedEmbeddingService(
            {
                "ok-1": [1.0, 0.0],
                "huge": PayloadTooLargeError("too many tokens"),
                "ok-2": [0.0, 1.0],
                "busy": RateLimitedError("slow down", retry_after=7.0),
                "offline": TransportError("connection refused"),
            }
        )
        indexer = DocumentIndexer(service, memory_store)

        report = await indexer.index_texts(["ok-1", "huge", "ok-2", "busy", "offline"])

        assert report.indexed_count == 2
        assert [f.position for f in report.failures] == [1, 3, 4]
        assert report.failures[0].code == ErrorCode.EMBEDDING_PAYLOAD_TOO_LARGE.value
        assert report.failures[1].retry_after == 7.0
        assert report.failures[2].code == ErrorCode.EMBEDDING_TRANSPORT_ERROR.value
        assert [r.text for r in await memory_store.records()] == ["ok-1", "ok-2"]

    @pytest.mark.asyncio
    async def test_auth_error_aborts(self, memory_store) -> None:
        """A rejected credential stops the run."""
        service = ScriptedEmbeddingService({"a": AuthError("bad token")})
        indexer = DocumentIndexer(service, memory_store)

        with pytest.raises(AuthError):
            await indexer.index_texts(["a"])

    @pytest.mark.asyncio
    async def test_store_rejection_reported(self, memory_store) -> None:
        """A vector the store rejects is reported at its original position."""
        service = ScriptedEmbeddingService(
            {
                "a": [1.0, 0.0],
                "skip": PayloadTooLargeError("too big"),
                "wrong": [1.0, 0.0, 0.0],
                "b": [0.0, 1.0],
            }
        )
        indexer = DocumentIndexer(service, memory_store)

        report = await indexer.index_texts(["a", "skip", "wrong", "b"])

        assert report.indexed_count == 2
        assert [(f.position, f.source) for f in report.failures] == [
            (1, "text[1]"),
            (2, "text[2]"),
        ]
        assert report.failures[1].code == ErrorCode.DIMENSION_MISMATCH.value

    @pytest.mark.asyncio
    async def test_index_files(self, tmp_path: Path, memory_store) -> None:
        """Each readable file becomes one record; unreadable files are reported."""
        first = tmp_path / "first.txt"
        first.write_text("alpha", encoding="utf-8")
        second = tmp_path / "second.txt"
        second.write_text("beta", encoding="utf-8")
        missing = tmp_path / "missing.txt"

        service = ScriptedEmbeddingService({"alpha": [1.0, 0.0], "beta": [0.0, 1.0]})
        indexer = DocumentIndexer(service, memory_store)

        report = await indexer.index_files([first, missing, second])

        assert report.indexed_count == 2
        assert len(report.failures) == 1
        assert report.failures[0].position == 1
        assert report.failures[0].code == ErrorCode.DOCUMENT_NOT_FOUND.value

        records = await memory_store.records()
        assert [r.metadata["file_name"] for r in records] == ["first.txt", "second.txt"]
        assert [r.metadata["index"] for r in records] == [0, 2]

    @pytest.mark.asyncio
    async def test_blank_file_not_embedded(self, tmp_path: Path, memory_store) -> None:
        """A whitespace-only file is reported without an embedding request."""
        blank = tmp_path / "blank.txt"
        blank.write_text("  \n", encoding="utf-8")
        text = tmp_path / "text.txt"
        text.write_text("alpha", encoding="utf-8")

        service = ScriptedEmbeddingService({"alpha": [1.0, 0.0]})
        indexer = DocumentIndexer(service, memory_store)

        report = await indexer.index_files([blank, text])

        assert report.indexed_count == 1
        assert report.failures[0].position == 0
        assert report.failures[0].code == ErrorCode.DOCUMENT_EMPTY.value
        assert [r.text for r in await memory_store.records()] == ["alpha"]
