"""Vector store data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """A stored text with its embedding.

    Records are frozen once inserted; the vector is kept as a tuple so it
    cannot be mutated in place either.

    Attributes:
        id: Store-unique identifier.
        text: The embedded text.
        vector: The embedding vector.
        metadata: Caller-supplied metadata (filename, timestamp, index, ...).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique record identifier")
    text: str = Field(description="Embedded text")
    vector: tuple[float, ...] = Field(description="Embedding vector")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Record metadata",
    )

    @property
    def dimensions(self) -> int:
        """Length of the stored vector."""
        return len(self.vector)


class SearchResult(BaseModel):
    """A record paired with its similarity to a query vector.

    Attributes:
        record: The matched record.
        score: Cosine similarity in [-1, 1] (higher is more similar).
    """

    model_config = ConfigDict(frozen=True)

    record: Record = Field(description="Matched record")
    score: float = Field(description="Similarity score")


class BatchInsertFailure(BaseModel):
    """One rejected item from an insert_many call."""

    position: int = Field(description="Index of the item in the batch")
    code: str = Field(description="Error code")
    message: str = Field(description="Error message")


class BatchInsertResult(BaseModel):
    """Outcome of a non-transactional batch insert.

    Attributes:
        inserted_ids: Ids of the items that were stored, in batch order.
        failures: Items that were rejected.
    """

    inserted_ids: list[str] = Field(default_factory=list)
    failures: list[BatchInsertFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every item was stored."""
        return not self.failures
