"""
Knowledge Ingestion CLI for the Lagoon Concierge engine.

Embeds the static content store into the per-locale Pinecone
namespaces used by vector search.

Usage:
    python -m ingest.main --locale en
    python -m ingest.main --locale all --clear
    python -m ingest.main --locale is --dry-run
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config.settings import configure_logging, get_settings
from retrieval.content_store import StaticContentStore
from retrieval.embedder import EmbeddingService
from retrieval.pinecone_client import PineconeClient, PineconeConfig

logger = logging.getLogger(__name__)

# Pinecone metadata values are capped; keep stored text short
MAX_METADATA_TEXT = 1000


@dataclass
class KnowledgeDocument:
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def build_documents(store: StaticContentStore, locale: str) -> List[KnowledgeDocument]:
    """Flatten one locale of the content store into documents."""
    documents = []
    for ref, text in store.documents(locale):
        documents.append(KnowledgeDocument(
            id=f"{locale}:{ref}",
            text=text,
            metadata={
                "type": ref.split(".", 1)[0],
                "section": ref,
                "locale": locale,
            },
        ))
    return documents


class IngestionPipeline:
    """Content store -> embeddings -> Pinecone namespace."""

    def __init__(
        self,
        store: Optional[StaticContentStore] = None,
        embedding_service: Optional[EmbeddingService] = None,
        pinecone_client: Optional[PineconeClient] = None,
    ):
        self.settings = get_settings()
        self.store = store if store is not None else StaticContentStore.from_default()
        self.embedding_service = embedding_service
        self.pinecone_client = pinecone_client

    def connect(self):
        """Create the embedding and Pinecone clients from settings."""
        s = self.settings
        if not s.pinecone_api_key:
            logger.error("PINECONE_API_KEY not set")
            sys.exit(1)

        if self.embedding_service is None:
            self.embedding_service = EmbeddingService.from_settings(s)
        if self.pinecone_client is None:
            self.pinecone_client = PineconeClient(PineconeConfig(
                api_key=s.pinecone_api_key,
                index_name=s.pinecone_index_name,
                cloud=s.pinecone_cloud,
                region=s.pinecone_region,
                dimension=self.embedding_service.dimension,
            ))

    async def ingest_locale(self, locale: str, clear: bool = False) -> int:
        """
        Embed and upsert one locale.

        Args:
            locale: Content locale (also the namespace)
            clear: Remove existing vectors in the namespace first

        Returns:
            Number of vectors upserted
        """
        documents = build_documents(self.store, locale)
        if not documents:
            logger.warning(f"No documents for locale '{locale}'")
            return 0

        namespace = PineconeClient.namespace_for(locale)
        if clear:
            self.pinecone_client.clear_namespace(namespace)

        logger.info(f"Embedding {len(documents)} documents for namespace '{namespace}'")
        embeddings = await self.embedding_service.embed_texts([d.text for d in documents])

        vectors = [
            {
                "id": doc.id,
                "values": embedding,
                "metadata": {**doc.metadata, "text": doc.text[:MAX_METADATA_TEXT]},
            }
            for doc, embedding in zip(documents, embeddings)
        ]
        return self.pinecone_client.upsert(vectors, namespace=namespace)

    async def ingest(self, locales: List[str], clear: bool = False) -> Dict[str, int]:
        counts = {}
        for locale in locales:
            counts[locale] = await self.ingest_locale(locale, clear=clear)
        logger.info(f"Ingestion complete: {counts}")
        return counts


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Lagoon Concierge knowledge ingestion")
    parser.add_argument(
        "--locale",
        choices=["en", "is", "all"],
        default="all",
        help="Content locale to ingest",
    )
    parser.add_argument("--clear", action="store_true", help="Clear the namespace before upserting")
    parser.add_argument("--dry-run", action="store_true", help="List documents without embedding")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)

    store = StaticContentStore.from_default()
    locales = store.locales if args.locale == "all" else [args.locale]

    if args.dry_run:
        for locale in locales:
            documents = build_documents(store, locale)
            logger.info(f"{locale}: {len(documents)} documents")
            for doc in documents:
                logger.info(f"  {doc.id} ({len(doc.text)} chars)")
        return

    pipeline = IngestionPipeline(store=store)
    pipeline.connect()
    asyncio.run(pipeline.ingest(locales, clear=args.clear))
    logger.info("Ingestion pipeline finished")


if __name__ == "__main__":
    main()
