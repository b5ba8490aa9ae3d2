"""Retrieval and indexing data models."""

from typing import Any

from pydantic import BaseModel, Field


class RetrievalResult(BaseModel):
    """Result from a retrieval operation.

    Attributes:
        record_id: Identifier of the matched record.
        content: The retrieved text content.
        score: Cosine similarity (higher is more relevant).
        source: Source document identifier.
        metadata: Metadata stored with the record.
    """

    record_id: str = Field(description="Matched record identifier")
    content: str = Field(description="Retrieved text content")
    score: float = Field(description="Relevance score")
    source: str = Field(description="Source document identifier")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )


class IndexFailure(BaseModel):
    """A document that could not be indexed.

    Attributes:
        position: Index of the document in the run.
        source: Where the document came from.
        code: Error code.
        message: Error message.
        retry_after: Wait hint in seconds for rate-limited documents.
    """

    position: int
    source: str
    code: str
    message: str
    retry_after: float | None = None


class IndexReport(BaseModel):
    """Outcome of an indexing run."""

    record_ids: list[str] = Field(default_factory=list)
    failures: list[IndexFailure] = Field(default_factory=list)

    @property
    def indexed_count(self) -> int:
        """Number of documents stored."""
        return len(self.record_ids)
