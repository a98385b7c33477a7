"""
Vector Search Service for the Lagoon Concierge engine.

Embeds a query and searches the locale namespace of the knowledge
index. Bounded by a timeout and never raises: failures are logged and
degrade to an empty result.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from conversation.errors import RetrievalUnavailable

from .embedder import EmbeddingService
from .pinecone_client import PineconeClient

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, int, float, str]


class VectorSearch(Protocol):
    """Anything the knowledge retriever can use for similarity search."""

    async def search(
        self,
        query: str,
        top_k: int = 5,
        min_similarity: float = 0.5,
        language: str = "en",
    ) -> List[Dict[str, Any]]:
        ...


class SearchResultCache:
    """Time-bounded LRU cache of search results."""

    def __init__(self, ttl_seconds: float = 3600, maxsize: int = 500, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[float, List[Dict[str, Any]]]]" = OrderedDict()

    def get(self, key: CacheKey) -> Optional[List[Dict[str, Any]]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, results = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return results

    def put(self, key: CacheKey, results: List[Dict[str, Any]]):
        self._entries[key] = (self._clock(), results)
        self._entries.move_to_end(key)
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)


class VectorSearchService:
    """
    Similarity search over the knowledge index.

    Pinecone calls are blocking and run in a worker thread. Only
    successful searches are cached.
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        index: PineconeClient,
        timeout_seconds: float = 3.0,
        cache: Optional[SearchResultCache] = None,
    ):
        """
        Initialize the search service.

        Args:
            embedder: Query embedding service
            index: Knowledge index client
            timeout_seconds: Upper bound for embed + query
            cache: Result cache (a one-hour cache by default)
        """
        self.embedder = embedder
        self.index = index
        self.timeout_seconds = timeout_seconds
        self.cache = cache if cache is not None else SearchResultCache()

    @classmethod
    def from_settings(cls, settings, embedder: EmbeddingService, index: PineconeClient) -> "VectorSearchService":
        return cls(
            embedder=embedder,
            index=index,
            timeout_seconds=settings.vector_timeout_seconds,
            cache=SearchResultCache(
                ttl_seconds=settings.vector_cache_ttl_seconds,
                maxsize=settings.vector_cache_size,
            ),
        )

    async def search(
        self,
        query: str,
        top_k: int = 5,
        min_similarity: float = 0.5,
        language: str = "en",
    ) -> List[Dict[str, Any]]:
        """
        Search for knowledge similar to the query.

        Args:
            query: Query text
            top_k: Maximum results
            min_similarity: Similarity floor
            language: Session language; selects the namespace

        Returns:
            Dicts with content, metadata and similarity, best first.
            Empty on any failure.
        """
        namespace = PineconeClient.namespace_for(language)
        key = (query.strip().lower(), top_k, min_similarity, namespace)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Vector cache hit for '{query}'")
            return cached

        try:
            results = await self._search_with_timeout(query, top_k, min_similarity, namespace)
        except RetrievalUnavailable as e:
            logger.warning(f"{e}; continuing without vector results")
            return []

        self.cache.put(key, results)
        logger.info(f"Vector search '{query}' ({namespace}): {len(results)} results")
        return results

    async def _search_with_timeout(
        self, query: str, top_k: int, min_similarity: float, namespace: str
    ) -> List[Dict[str, Any]]:
        try:
            return await asyncio.wait_for(
                self._search(query, top_k, min_similarity, namespace),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise RetrievalUnavailable(f"Vector search timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise RetrievalUnavailable(f"Vector search failed: {e}") from e

    async def _search(
        self, query: str, top_k: int, min_similarity: float, namespace: str
    ) -> List[Dict[str, Any]]:
        embedding = await self.embedder.embed_text(query)
        matches = await asyncio.to_thread(
            self.index.query,
            embedding,
            top_k=top_k,
            namespace=namespace,
            min_score=min_similarity,
        )

        results = [
            {
                "content": match.text,
                "metadata": {**match.metadata, "id": match.id},
                "similarity": match.score,
            }
            for match in matches
            if match.score >= min_similarity and match.text
        ]
        results.sort(key=lambda r: r["similarity"], reverse=True)
        return results[:top_k]
