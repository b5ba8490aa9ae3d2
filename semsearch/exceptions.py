"""Application exception hierarchy.

All custom exceptions inherit from SemanticSearchError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "SEM-1000"
    CONFIGURATION_ERROR = "SEM-1001"
    VALIDATION_ERROR = "SEM-1002"
    MISSING_CREDENTIAL = "SEM-1003"
    INVALID_K = "SEM-1004"

    # Document errors (2xxx)
    DOCUMENT_NOT_FOUND = "SEM-2000"
    DOCUMENT_PARSE_ERROR = "SEM-2001"
    DOCUMENT_EMPTY = "SEM-2002"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "SEM-3000"
    EMBEDDING_RATE_LIMITED = "SEM-3001"
    EMBEDDING_PAYLOAD_TOO_LARGE = "SEM-3002"
    EMBEDDING_TRANSPORT_ERROR = "SEM-3003"
    EMBEDDING_AUTH_ERROR = "SEM-3004"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "SEM-4000"
    DIMENSION_MISMATCH = "SEM-4001"

    # Retrieval errors (5xxx)
    RETRIEVAL_ERROR = "SEM-5000"


class SemanticSearchError(Exception):
    """Base exception for all semantic search errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serialisable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(SemanticSearchError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class MissingCredentialError(ConfigurationError):
    """The embedding API token is not configured. Fatal at startup."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.MISSING_CREDENTIAL, details)


class ValidationError(SemanticSearchError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class InvalidKError(ValidationError):
    """Requested result count is not a positive integer."""

    def __init__(self, k: int) -> None:
        super().__init__(
            f"k must be a positive integer, got {k}",
            ErrorCode.INVALID_K,
            {"k": k},
        )


class DocumentError(SemanticSearchError):
    """Document loading error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DOCUMENT_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(SemanticSearchError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class RateLimitedError(EmbeddingError):
    """The embedding API rejected the call with HTTP 429.

    Attributes:
        retry_after: Seconds the server asked us to wait, if it said.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        details = {**(details or {}), "retry_after": retry_after}
        super().__init__(message, ErrorCode.EMBEDDING_RATE_LIMITED, details)


class PayloadTooLargeError(EmbeddingError):
    """Input exceeds the model's token budget and must be split by the caller."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMBEDDING_PAYLOAD_TOO_LARGE, details)


class TransportError(EmbeddingError):
    """Network failure or unexpected HTTP status from the embedding API."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMBEDDING_TRANSPORT_ERROR, details)


class AuthError(EmbeddingError):
    """The embedding API rejected the credential."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMBEDDING_AUTH_ERROR, details)


class VectorStoreError(SemanticSearchError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class DimensionMismatchError(VectorStoreError):
    """Two vectors that must share a dimension do not."""

    def __init__(
        self,
        expected: int,
        actual: int,
        message: str | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"Vector dimension mismatch: expected {expected}, got {actual}",
            ErrorCode.DIMENSION_MISMATCH,
            {"expected": expected, "actual": actual},
        )


class RetrievalError(SemanticSearchError):
    """Retrieval operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RETRIEVAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
