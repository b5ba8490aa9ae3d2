"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from semsearch.exceptions import MissingCredentialError


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    """Vector store backend."""

    MEMORY = "memory"
    QDRANT = "qdrant"


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration.

    Defaults target the GitHub Models inference endpoint, which speaks the
    OpenAI embeddings API.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    base_url: str = Field(
        default="https://models.github.ai/inference",
        description="Embedding API base URL",
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name",
    )
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("EMBEDDING_API_KEY", "GITHUB_TOKEN"),
        description="Bearer token for the embedding API",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )
    batch_size: int = Field(
        default=16,
        description="Maximum texts per embedding request",
    )
    dimensions: int | None = Field(
        default=None,
        description="Requested output dimensions (models that support shortening)",
    )

    def require_api_key(self) -> str:
        """Return the API token or fail if none is configured.

        Raises:
            MissingCredentialError: If neither EMBEDDING_API_KEY nor
                GITHUB_TOKEN is set.
        """
        if self.api_key is None or not self.api_key.get_secret_value().strip():
            raise MissingCredentialError(
                "GITHUB_TOKEN not found in environment variables",
                details={"variables": ["GITHUB_TOKEN", "EMBEDDING_API_KEY"]},
            )
        return self.api_key.get_secret_value()


class SearchSettings(BaseSettings):
    """Search behaviour configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    top_k: int = Field(
        default=3,
        description="Number of results returned per query",
    )
    backend: StoreBackend = Field(
        default=StoreBackend.MEMORY,
        description="Vector store backend",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default=":memory:",
        description="Qdrant server URL, or :memory: for the embedded local mode",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="semantic_search",
        description="Collection rebuilt on every run",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    metrics_port: int | None = Field(
        default=None,
        description="Expose Prometheus metrics on this port when set",
    )

    # Nested settings
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
