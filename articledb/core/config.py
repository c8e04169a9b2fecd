"""Configuration settings for the articledb service."""
import os
from functools import lru_cache

import redis
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration settings loaded from environment variables."""

    # Store Configuration
    store_backend: str = Field(
        default_factory=lambda: os.getenv("STORE_BACKEND", "memory").lower(),
        description="Article store backend: 'memory' or 'redis'"
    )
    redis_url: str = Field(
        default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        description="Redis connection URL for the article store"
    )
    redis_key_prefix: str = Field(
        default_factory=lambda: os.getenv("REDIS_KEY_PREFIX", "article"),
        description="Key prefix for articles stored in Redis"
    )

    # Extractor Configuration
    extractor_mode: str = Field(
        default_factory=lambda: os.getenv("EXTRACTOR_MODE", "noop").lower(),
        description="Extractor mode: 'noop' (no remote calls) or 'llm' (OpenAI/Azure OpenAI)"
    )
    encoder_enabled: bool = Field(
        default_factory=lambda: os.getenv("ENCODER_ENABLED", "false").lower() in ["1", "true", "yes"],
        description="Run the embedding branch when adding articles"
    )
    keywords_enabled: bool = Field(
        default_factory=lambda: os.getenv("KEYWORDS_ENABLED", "false").lower() in ["1", "true", "yes"],
        description="Run the local YAKE keyword branch when adding articles"
    )
    keywords_top: int = Field(
        default_factory=lambda: int(os.getenv("KEYWORDS_TOP", "15")),
        description="Maximum number of keywords extracted per article"
    )

    # OpenAI Configuration
    openai_api_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("OPENAI_API_KEY", "")),
        description="OpenAI API key for embeddings and LLM"
    )
    openai_llm_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini"),
        description="OpenAI model for summaries and named entity recognition"
    )
    openai_embeddings_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_EMBEDDINGS_MODEL", "text-embedding-3-small"),
        description="OpenAI model for text embeddings"
    )

    # Azure OpenAI Configuration
    azure_openai_enabled: bool = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENABLED", "false").lower() in ["1", "true", "yes"],
        description="Enable Azure OpenAI for embeddings and LLM"
    )
    azure_openai_api_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("AZURE_OPENAI_API_KEY", os.getenv("OPENAI_API_KEY", ""))),
        description="Azure OpenAI API key (or reuse OPENAI_API_KEY)"
    )
    azure_openai_endpoint: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT", ""),
        description="Azure OpenAI endpoint, e.g. https://your-resource.openai.azure.com"
    )
    azure_openai_api_version: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
        description="Azure OpenAI API version"
    )
    azure_openai_chat_deployment: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_CHAT_DEPLOYMENT", ""),
        description="Azure OpenAI chat deployment for summaries and NER"
    )
    azure_openai_embeddings_deployment: str = Field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_EMBEDDINGS_DEPLOYMENT", ""),
        description="Azure OpenAI embeddings deployment name"
    )

    # LLM Request Configuration
    llm_max_input_chars: int = Field(
        default_factory=lambda: int(os.getenv("LLM_MAX_INPUT_CHARS", "20000")),
        description="Maximum characters of input text to send to the LLM"
    )
    summary_max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("SUMMARY_MAX_TOKENS", "220")),
        description="Token limit for generated summaries"
    )
    ner_max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("NER_MAX_TOKENS", "1000")),
        description="Token limit for the named entity response"
    )

    # Langfuse Configuration
    langfuse_public_key: str = Field(
        default_factory=lambda: os.getenv("LANGFUSE_PUBLIC_KEY", ""),
        description="Langfuse public key; tracing is off when empty"
    )
    langfuse_secret_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("LANGFUSE_SECRET_KEY", "")),
        description="Langfuse secret key"
    )
    langfuse_host: str = Field(
        default_factory=lambda: os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com"),
        description="Langfuse host"
    )

    # API Configuration
    api_key: str = Field(
        default_factory=lambda: os.getenv("API_KEY", ""),
        description="Required X-API-Key header value; authentication is off when empty"
    )
    max_request_size: int = Field(
        default_factory=lambda: int(os.getenv("MAX_REQUEST_SIZE", str(1024 * 1024))),
        description="Maximum accepted request body in bytes"
    )
    host: str = Field(
        default_factory=lambda: os.getenv("HOST", "0.0.0.0"),
        description="Bind address for the HTTP server"
    )
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "8080")),
        description="Port for the HTTP server"
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper(),
        description="Root log level"
    )

    class Config:
        env_file = ".env"

    def model_post_init(self, __context):
        """Validate configuration after initialization."""
        valid_backends = ["memory", "redis"]
        if self.store_backend not in valid_backends:
            raise ValueError(f"Invalid store_backend '{self.store_backend}'. Must be one of: {valid_backends}")

        valid_modes = ["noop", "llm"]
        if self.extractor_mode not in valid_modes:
            raise ValueError(f"Invalid extractor_mode '{self.extractor_mode}'. Must be one of: {valid_modes}")


settings = Settings()


@lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """Get a cached Redis client instance."""
    return redis.from_url(settings.redis_url, decode_responses=True)
