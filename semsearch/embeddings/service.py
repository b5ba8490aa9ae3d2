"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from semsearch.config import EmbeddingSettings, get_settings
from semsearch.embeddings.models import EmbeddingResult
from semsearch.exceptions import (
    AuthError,
    DimensionMismatchError,
    EmbeddingError,
    ErrorCode,
    PayloadTooLargeError,
    RateLimitedError,
    TransportError,
)
from semsearch.logging_config import get_logger
from semsearch.observability.metrics import track_embedding_request

logger = get_logger(__name__)

# Phrases providers use in 400 bodies when the input is over the token budget
_SIZE_LIMIT_MARKERS = (
    "maximum context length",
    "tokens_limit_reached",
    "too many tokens",
    "token limit",
    "too large",
)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header into seconds to wait.

    Args:
        value: Header value, either delta-seconds or an HTTP-date.

    Returns:
        Non-negative seconds, or None if absent or unparseable.
    """
    if not value:
        return None

    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None

    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - datetime.now(UTC)).total_seconds())


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings. Every vector a
    service returns within one session has the same dimension.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts.

        Each text is embedded independently; output order matches input.

        Args:
            texts: List of texts to embed.

        Returns:
            List of EmbeddingResult objects.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service using an OpenAI-style HTTP API.

    Sends ``{"model", "input"}`` to ``{base_url}/embeddings`` with a bearer
    token and reads ``{"data": [{"embedding": [...]}, ...]}`` back. Works
    against GitHub Models, OpenAI, and compatible servers.

    Failures are never retried here. A 429 surfaces as RateLimitedError
    carrying the server's Retry-After hint.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
        "openai/text-embedding-3-small": 1536,
        "openai/text-embedding-3-large": 3072,
    }
    DEFAULT_DIMENSIONS = 1536

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.

        Raises:
            MissingCredentialError: If no API token is configured.
        """
        self._settings = settings or get_settings().embedding
        self._api_key = self._settings.require_api_key()
        self._client = client
        self._owns_client = client is None
        self._dimensions: int | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions.

        The length of the first vector received wins; before that, the
        requested or known dimension of the model is reported.
        """
        if self._dimensions is not None:
            return self._dimensions

        if self._settings.dimensions:
            return self._settings.dimensions

        return self.MODEL_DIMENSIONS.get(self._settings.model, self.DEFAULT_DIMENSIONS)

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text."""
        results = await self.embed_batch([text])
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings, batch_size texts per request."""
        if not texts:
            return []

        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/embeddings"

        all_results: list[EmbeddingResult] = []
        batch_size = max(1, self._settings.batch_size)

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            batch_results = await self._embed_batch_request(client, url, batch)
            all_results.extend(batch_results)

        return all_results

    async def _embed_batch_request(
        self,
        client: httpx.AsyncClient,
        url: str,
        texts: list[str],
    ) -> list[EmbeddingResult]:
        """Make embedding request for a batch.

        Args:
            client: HTTP client.
            url: Embedding endpoint URL.
            texts: Batch of texts.

        Returns:
            List of EmbeddingResult objects.

        Raises:
            EmbeddingError: If request fails.
        """
        payload: dict[str, Any] = {
            "model": self._settings.model,
            "input": texts,
        }
        if self._settings.dimensions:
            payload["dimensions"] = self._settings.dimensions

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        start_time = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = self._error_for_status(e.response, url)
            track_embedding_request(
                model=self.model_name,
                duration=time.perf_counter() - start_time,
                batch_size=len(texts),
                status=error.code.name.lower(),
            )
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise error from e
        except httpx.RequestError as e:
            track_embedding_request(
                model=self.model_name,
                duration=time.perf_counter() - start_time,
                batch_size=len(texts),
                status="transport_error",
            )
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise TransportError(
                f"Failed to connect to embedding service: {e}",
                details={"url": url, "error": str(e)},
            ) from e

        track_embedding_request(
            model=self.model_name,
            duration=time.perf_counter() - start_time,
            batch_size=len(texts),
        )
        return self._parse_response(response, texts)

    def _error_for_status(self, response: httpx.Response, url: str) -> EmbeddingError:
        """Map a non-2xx response onto the embedding error taxonomy."""
        status = response.status_code
        body = response.text[:500]
        details = {"status_code": status, "url": url, "body": body}

        if status in (401, 403):
            return AuthError(
                f"Embedding API rejected the credential ({status})",
                details=details,
            )

        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            return RateLimitedError(
                "Embedding API rate limit exceeded",
                retry_after=retry_after,
                details=details,
            )

        if status == 413 or (
            status == 400 and any(marker in body.lower() for marker in _SIZE_LIMIT_MARKERS)
        ):
            return PayloadTooLargeError(
                "Input exceeds the embedding model's token limit",
                details=details,
            )

        return TransportError(
            f"Embedding API error: {status} {body}".rstrip(),
            details=details,
        )

    def _parse_response(
        self,
        response: httpx.Response,
        texts: list[str],
    ) -> list[EmbeddingResult]:
        """Turn a 2xx response body into results, in input order."""
        try:
            data = response.json()
            items = data["data"]

            if len(items) != len(texts):
                raise EmbeddingError(
                    f"Expected {len(texts)} embeddings, got {len(items)}",
                    details={"expected": len(texts), "received": len(items)},
                )

            # OpenAI-style responses carry an index; order by it when present
            if all("index" in item for item in items):
                items = sorted(items, key=lambda item: item["index"])

            vectors = [[float(x) for x in item["embedding"]] for item in items]

        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        results: list[EmbeddingResult] = []
        for text, vector in zip(texts, vectors):
            self._check_dimensions(vector)
            results.append(
                EmbeddingResult.from_vector(
                    text=text,
                    embedding=vector,
                    model=self._settings.model,
                )
            )

        return results

    def _check_dimensions(self, vector: list[float]) -> None:
        """Hold every vector of the session to the first one's length."""
        if not vector:
            raise EmbeddingError("Embedding service returned an empty vector")

        if self._dimensions is None:
            self._dimensions = len(vector)
            logger.debug(f"Embedding dimension learned: {self._dimensions}")
        elif len(vector) != self._dimensions:
            raise DimensionMismatchError(
                expected=self._dimensions,
                actual=len(vector),
                message=(
                    f"Embedding service returned {len(vector)} dimensions, "
                    f"session started with {self._dimensions}"
                ),
            )
