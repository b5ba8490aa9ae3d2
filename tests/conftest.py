"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator

import pytest

from semsearch.config import get_settings
from semsearch.embeddings.models import EmbeddingResult
from semsearch.embeddings.service import EmbeddingService
from semsearch.vectorstore.service import InMemoryVectorStore

# Hand-picked 3-d vectors: the first two point almost the same way,
# the third is nearly orthogonal to both.
SCENARIO_VECTORS = {
    "The canine barked loudly.": [1.0, 0.2, 0.0],
    "The dog made a noise.": [0.9, 0.3, 0.1],
    "The electron spins rapidly.": [0.1, 0.1, 1.0],
}


class StaticEmbeddingService(EmbeddingService):
    """Embedding service answering from a fixed text -> vector table."""

    def __init__(self, vectors: dict[str, list[float]]) -> None:
        self._vectors = vectors
        self.calls: list[str] = []

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        return EmbeddingResult.from_vector(
            text=text,
            embedding=list(self._vectors[text]),
            model=self.model_name,
        )

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        return [await self.embed(text) for text in texts]

    @property
    def model_name(self) -> str:
        return "static-test-model"

    @property
    def dimensions(self) -> int:
        return len(next(iter(self._vectors.values())))


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from a developer's token and cached settings."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("EMBEDDING_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scenario_embeddings() -> StaticEmbeddingService:
    """Embedding service for the canine/dog/electron sentences."""
    return StaticEmbeddingService(SCENARIO_VECTORS)


@pytest.fixture
def memory_store() -> InMemoryVectorStore:
    """Empty in-memory vector store."""
    return InMemoryVectorStore()
