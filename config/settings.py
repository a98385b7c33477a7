"""
Centralized configuration for the Lagoon Concierge engine.

All settings are loaded from environment variables via .env file.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Brand
    brand_name: str = Field(default="Sky Lagoon", env="BRAND_NAME")

    # Languages
    default_language: str = Field(default="en", env="DEFAULT_LANGUAGE")
    target_language: str = Field(default="is", env="TARGET_LANGUAGE")
    target_language_chars: str = Field(default="áðéíóúýþæö", env="TARGET_LANGUAGE_CHARS")

    # Session context
    session_ttl_seconds: int = Field(default=24 * 60 * 60, env="SESSION_TTL_SECONDS")
    history_cap: int = Field(default=10, env="HISTORY_CAP")
    reference_memory_size: int = Field(default=5, env="REFERENCE_MEMORY_SIZE")
    date_check_max_tokens: int = Field(default=5, env="DATE_CHECK_MAX_TOKENS")

    # Booking change gating
    booking_change_clear_confidence: float = Field(default=0.7, env="BOOKING_CHANGE_CLEAR_CONFIDENCE")
    booking_change_show_confidence: float = Field(default=0.8, env="BOOKING_CHANGE_SHOW_CONFIDENCE")

    # AWS / Bedrock
    aws_region: str = Field(default="us-east-1", env="AWS_REGION")
    bedrock_embed_model_id: str = Field(
        default="amazon.titan-embed-text-v2:0", env="BEDROCK_EMBED_MODEL_ID"
    )

    # OpenAI (fallback)
    openai_api_key: Optional[str] = Field(default=None, env="OPENAI_API_KEY")
    openai_embed_model: str = Field(default="text-embedding-3-small", env="OPENAI_EMBED_MODEL")

    # Embedding provider selection
    embedding_provider: str = Field(default="bedrock", env="EMBEDDING_PROVIDER")  # bedrock | openai
    embedding_cache_size: int = Field(default=2000, env="EMBEDDING_CACHE_SIZE")

    # Pinecone
    pinecone_api_key: str = Field(default="", env="PINECONE_API_KEY")
    pinecone_index_name: str = Field(default="lagoon-knowledge", env="PINECONE_INDEX_NAME")
    pinecone_cloud: str = Field(default="aws", env="PINECONE_CLOUD")
    pinecone_region: str = Field(default="us-east-1", env="PINECONE_REGION")

    # Retrieval
    vector_top_k: int = Field(default=5, env="VECTOR_TOP_K")
    vector_min_similarity: float = Field(default=0.5, env="VECTOR_MIN_SIMILARITY")
    vector_timeout_seconds: float = Field(default=3.0, env="VECTOR_TIMEOUT_SECONDS")
    vector_cache_ttl_seconds: int = Field(default=60 * 60, env="VECTOR_CACHE_TTL_SECONDS")
    vector_cache_size: int = Field(default=500, env="VECTOR_CACHE_SIZE")
    short_query_max_tokens: int = Field(default=3, env="SHORT_QUERY_MAX_TOKENS")
    knowledge_max_tokens: int = Field(default=3000, env="KNOWLEDGE_MAX_TOKENS")

    # Prompt assembly
    prompt_cache_ttl_seconds: int = Field(default=24 * 60 * 60, env="PROMPT_CACHE_TTL_SECONDS")
    prompt_cache_max_size: int = Field(default=100, env="PROMPT_CACHE_MAX_SIZE")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    debug: bool = Field(default=False, env="DEBUG")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_bedrock(self) -> bool:
        return self.embedding_provider.lower() == "bedrock"

    @property
    def is_openai(self) -> bool:
        return self.embedding_provider.lower() == "openai"

    @property
    def embed_model_id(self) -> str:
        if self.is_openai:
            return self.openai_embed_model
        return self.bedrock_embed_model_id


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None, level: Optional[str] = None):
    """Apply the configured log level (or an explicit override) to the root logger."""
    if level is None:
        settings = settings if settings is not None else get_settings()
        level = "DEBUG" if settings.debug else settings.log_level
    level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
