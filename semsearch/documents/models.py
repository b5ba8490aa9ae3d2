"""Document data models."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class DocumentMetadata(BaseModel):
    """Metadata associated with a document.

    Attributes:
        source: Original source path or identifier.
        created_at: When the document was loaded.
        extra: Additional metadata fields.
    """

    source: str = Field(description="Original source path or identifier")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the document was loaded",
    )
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata fields",
    )


class Document(BaseModel):
    """A text to be embedded as a single unit.

    Attributes:
        content: The text content of the document.
        metadata: Associated metadata.
    """

    content: str = Field(description="Text content of the document")
    metadata: DocumentMetadata = Field(description="Document metadata")

    @classmethod
    def from_text(
        cls,
        content: str,
        source: str,
        **extra: Any,
    ) -> "Document":
        """Create a document from text content.

        Args:
            content: The text content.
            source: Source identifier.
            **extra: Additional metadata.

        Returns:
            New Document instance.
        """
        metadata = DocumentMetadata(source=source, extra=extra)
        return cls(content=content, metadata=metadata)

    def record_metadata(self, index: int) -> dict[str, Any]:
        """Flatten metadata into the scalar mapping stored with a record.

        Args:
            index: Position of the document in the indexing run.
        """
        return {
            "source": self.metadata.source,
            "created_at": self.metadata.created_at.isoformat(),
            "index": index,
            **self.metadata.extra,
        }
