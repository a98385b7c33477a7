"""
Embedding Service for the Lagoon Concierge engine.

Turns queries and knowledge documents into vectors via AWS Bedrock
Titan or OpenAI. Provider calls are blocking SDK calls and run in a
worker thread.
"""

import asyncio
import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class EmbeddingCache:
    """
    LRU cache of query embeddings.

    Keyed by a hash of the normalized text, so casing and surrounding
    whitespace do not cause extra provider calls.
    """

    def __init__(self, maxsize: int = 2000):
        self.maxsize = maxsize
        self._entries: "OrderedDict[str, List[float]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _key(text: str) -> str:
        return hashlib.sha1(text.strip().lower().encode("utf-8")).hexdigest()

    def get(self, text: str) -> Optional[List[float]]:
        key = self._key(text)
        vector = self._entries.get(key)
        if vector is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return vector

    def put(self, text: str, vector: List[float]) -> None:
        key = self._key(text)
        self._entries[key] = vector
        self._entries.move_to_end(key)
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}


class EmbeddingProvider(Enum):
    """Supported embedding providers."""
    BEDROCK_TITAN = "bedrock"
    OPENAI = "openai"


@dataclass
class EmbeddingConfig:
    """Configuration for the embedding service."""
    provider: EmbeddingProvider = EmbeddingProvider.BEDROCK_TITAN
    model_id: str = "amazon.titan-embed-text-v2:0"
    dimension: int = 1024
    batch_size: int = 25
    aws_region: str = "eu-west-1"
    openai_api_key: Optional[str] = None
    max_chars: int = 25000


MODEL_DIMENSIONS = {
    "amazon.titan-embed-text-v2:0": 1024,
    "amazon.titan-embed-text-v1": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
}


class EmbeddingService:
    """
    Generates text embeddings.

    Bedrock is called once per text (concurrently within a batch);
    OpenAI embeds a whole batch per request.
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None, cache_size: int = 0):
        """
        Initialize the embedding service.

        Args:
            config: Embedding configuration
            cache_size: Enables the query embedding cache when > 0
        """
        self.config = config if config is not None else EmbeddingConfig()
        self.cache: Optional[EmbeddingCache] = EmbeddingCache(cache_size) if cache_size > 0 else None
        self._bedrock = None
        self._openai = None
        self._connect()

    @classmethod
    def from_settings(cls, settings) -> "EmbeddingService":
        provider = EmbeddingProvider.OPENAI if settings.is_openai else EmbeddingProvider.BEDROCK_TITAN
        config = EmbeddingConfig(
            provider=provider,
            model_id=settings.embed_model_id,
            dimension=MODEL_DIMENSIONS.get(settings.embed_model_id, 1024),
            aws_region=settings.aws_region,
            openai_api_key=settings.openai_api_key,
        )
        return cls(config, cache_size=settings.embedding_cache_size)

    def _connect(self):
        if self.config.provider == EmbeddingProvider.BEDROCK_TITAN:
            import boto3
            self._bedrock = boto3.client("bedrock-runtime", region_name=self.config.aws_region)
            logger.info(f"Bedrock embeddings ready ({self.config.model_id}, {self.config.aws_region})")
        else:
            from openai import OpenAI
            self._openai = OpenAI(api_key=self.config.openai_api_key)
            logger.info(f"OpenAI embeddings ready ({self.config.model_id})")

    @property
    def dimension(self) -> int:
        return MODEL_DIMENSIONS.get(self.config.model_id, self.config.dimension)

    async def embed_text(self, text: str) -> List[float]:
        """
        Embed a single text, consulting the cache first.

        Args:
            text: Query or document text

        Returns:
            Embedding vector
        """
        if self.cache is not None:
            cached = self.cache.get(text)
            if cached is not None:
                return cached

        if self.config.provider == EmbeddingProvider.BEDROCK_TITAN:
            vector = await asyncio.to_thread(self._invoke_bedrock, text)
        else:
            vector = (await asyncio.to_thread(self._invoke_openai, [text]))[0]

        if self.cache is not None:
            self.cache.put(text, vector)
        return vector

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed many texts in provider-sized batches, preserving order."""
        vectors: List[List[float]] = []
        for start in range(0, len(texts), self.config.batch_size):
            batch = texts[start:start + self.config.batch_size]
            if self.config.provider == EmbeddingProvider.OPENAI:
                vectors.extend(await asyncio.to_thread(self._invoke_openai, batch))
            else:
                vectors.extend(await asyncio.gather(
                    *[asyncio.to_thread(self._invoke_bedrock, text) for text in batch]
                ))
        return vectors

    def _invoke_bedrock(self, text: str) -> List[float]:
        try:
            response = self._bedrock.invoke_model(
                modelId=self.config.model_id,
                body=json.dumps({"inputText": text[:self.config.max_chars]}),
                contentType="application/json",
                accept="application/json",
            )
            vector = json.loads(response["body"].read())["embedding"]
        except Exception as e:
            logger.error(f"Bedrock embedding failed: {e}")
            raise
        logger.debug(f"Bedrock embedding dim={len(vector)}")
        return vector

    def _invoke_openai(self, texts: List[str]) -> List[List[float]]:
        try:
            response = self._openai.embeddings.create(model=self.config.model_id, input=texts)
        except Exception as e:
            logger.error(f"OpenAI embedding failed: {e}")
            raise
        logger.debug(f"OpenAI embedded {len(response.data)} texts")
        return [item.embedding for item in response.data]
