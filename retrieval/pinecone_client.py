"""
Pinecone Client for the Lagoon Concierge engine.

Vector index access for the knowledge base. Each locale lives in its
own namespace so a session's language selects the documents searched.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pinecone import Pinecone, ServerlessSpec

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """One match from a vector query."""
    id: str
    score: float
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PineconeConfig:
    """Configuration for the Pinecone client."""
    api_key: str
    index_name: str = "lagoon-knowledge"
    dimension: int = 1024
    metric: str = "cosine"
    cloud: str = "aws"
    region: str = "us-east-1"


class PineconeClient:
    """
    Knowledge index operations.

    Supports:
    - Index bootstrap (serverless)
    - Batched upsert per locale namespace
    - Similarity query with a score floor
    """

    NAMESPACES = {
        "en": "en",
        "is": "is",
    }
    DEFAULT_NAMESPACE = "en"
    UPSERT_BATCH_SIZE = 100

    def __init__(self, config: PineconeConfig):
        """
        Connect to Pinecone, creating the index if it does not exist.

        Args:
            config: Pinecone configuration
        """
        self.config = config
        self._client = Pinecone(api_key=config.api_key)

        existing = [idx.name for idx in self._client.list_indexes()]
        if config.index_name not in existing:
            logger.info(f"Creating Pinecone index '{config.index_name}' (dim={config.dimension})")
            self._client.create_index(
                name=config.index_name,
                dimension=config.dimension,
                metric=config.metric,
                spec=ServerlessSpec(cloud=config.cloud, region=config.region),
            )
        else:
            logger.info(f"Using Pinecone index '{config.index_name}'")

        self._index = self._client.Index(config.index_name)

    @classmethod
    def namespace_for(cls, language: Optional[str]) -> str:
        """Namespace for a language code; unknown and "auto" map to English."""
        return cls.NAMESPACES.get(language or "", cls.DEFAULT_NAMESPACE)

    def upsert(self, vectors: List[Dict[str, Any]], namespace: str) -> int:
        """
        Upsert vectors in batches.

        Args:
            vectors: Dicts with id, values and metadata
            namespace: Target namespace

        Returns:
            Number of vectors written
        """
        written = 0
        for start in range(0, len(vectors), self.UPSERT_BATCH_SIZE):
            batch = [
                (v["id"], v["values"], v.get("metadata", {}))
                for v in vectors[start:start + self.UPSERT_BATCH_SIZE]
            ]
            self._index.upsert(vectors=batch, namespace=namespace)
            written += len(batch)
            logger.debug(f"Upserted {written}/{len(vectors)} into '{namespace}'")

        logger.info(f"Upserted {written} vectors into namespace '{namespace}'")
        return written

    def query(
        self,
        embedding: List[float],
        top_k: int = 5,
        namespace: str = DEFAULT_NAMESPACE,
        min_score: float = 0.0,
    ) -> List[SearchResult]:
        """
        Query for similar documents.

        Args:
            embedding: Query vector
            top_k: Maximum matches
            namespace: Namespace to search
            min_score: Similarity floor

        Returns:
            Matches at or above the floor, best first
        """
        response = self._index.query(
            vector=embedding,
            top_k=top_k,
            namespace=namespace,
            include_metadata=True,
        )

        results = []
        for match in response.matches:
            if match.score < min_score:
                continue
            metadata = dict(match.metadata or {})
            results.append(SearchResult(
                id=match.id,
                score=match.score,
                text=metadata.pop("text", ""),
                metadata=metadata,
            ))

        logger.debug(f"Pinecone '{namespace}' returned {len(results)} matches >= {min_score}")
        return results

    def clear_namespace(self, namespace: str):
        """Remove every vector in a namespace."""
        self._index.delete(delete_all=True, namespace=namespace)
        logger.info(f"Cleared namespace '{namespace}'")

    def get_stats(self) -> Dict[str, Any]:
        stats = self._index.describe_index_stats()
        return {
            "total_vector_count": getattr(stats, "total_vector_count", 0),
            "dimension": getattr(stats, "dimension", 0),
            "namespaces": {
                name: getattr(ns, "vector_count", 0)
                for name, ns in (getattr(stats, "namespaces", {}) or {}).items()
            },
        }
