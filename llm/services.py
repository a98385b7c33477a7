"""
Service initialization for the Lagoon Concierge engine.

Creates and wires all components from settings.
"""

import logging
from typing import Optional

from config.settings import Settings, get_settings
from conversation.booking_change import BookingChangeTracker, KeywordBookingChangeDetector
from conversation.session_store import SessionContextStore
from retrieval.content_store import StaticContentStore
from retrieval.context_builder import ContextBuilder
from retrieval.embedder import EmbeddingService
from retrieval.knowledge_retriever import KnowledgeRetriever
from retrieval.pinecone_client import PineconeClient, PineconeConfig
from retrieval.query_rewriter import QueryRewriter
from retrieval.rule_matcher import RuleMatcher
from retrieval.token_estimator import TokenEstimator
from retrieval.vector_search import VectorSearchService

from .orchestrator import ChatOrchestrator, Generator
from .prompt_optimizer import PromptCache, PromptOptimizer
from .prompt_templates import PromptTemplates

logger = logging.getLogger(__name__)


class Services:
    """Container for all engine services."""

    def __init__(self, settings: Optional[Settings] = None, generator: Optional[Generator] = None):
        self.settings = settings
        self.generator = generator
        self.content_store: Optional[StaticContentStore] = None
        self.store: Optional[SessionContextStore] = None
        self.embedding_service: Optional[EmbeddingService] = None
        self.pinecone_client: Optional[PineconeClient] = None
        self.vector_search: Optional[VectorSearchService] = None
        self.retriever: Optional[KnowledgeRetriever] = None
        self.optimizer: Optional[PromptOptimizer] = None
        self.orchestrator: Optional[ChatOrchestrator] = None
        self._initialized = False

    def initialize(self):
        """Initialize all services. Vector search is optional."""
        if self._initialized:
            return

        if self.settings is None:
            self.settings = get_settings()
        logger.info(f"Initializing services for {self.settings.brand_name}")

        self.content_store = StaticContentStore.from_default()
        self.store = SessionContextStore.from_settings(self.settings)
        self._init_vector_search()
        self._init_retriever()
        self._init_orchestrator()

        self._initialized = True
        logger.info("All services initialized")

    def _init_vector_search(self):
        s = self.settings

        if not s.pinecone_api_key:
            logger.warning("PINECONE_API_KEY not set, vector search disabled")
            return

        try:
            self.embedding_service = EmbeddingService.from_settings(s)
            self.pinecone_client = PineconeClient(PineconeConfig(
                api_key=s.pinecone_api_key,
                index_name=s.pinecone_index_name,
                cloud=s.pinecone_cloud,
                region=s.pinecone_region,
                dimension=self.embedding_service.dimension,
            ))
        except Exception as e:
            # Rule-based retrieval still works without the index
            logger.error(f"Vector search initialization failed: {e}")
            logger.warning("Starting with rule-based retrieval only")
            return

        self.vector_search = VectorSearchService.from_settings(s, self.embedding_service, self.pinecone_client)
        logger.info("Vector search ready")

    def _init_retriever(self):
        s = self.settings
        self.retriever = KnowledgeRetriever(
            matcher=RuleMatcher(self.content_store),
            rewriter=QueryRewriter(short_query_max_tokens=s.short_query_max_tokens),
            vector_search=self.vector_search,
            top_k=s.vector_top_k,
            min_similarity=s.vector_min_similarity,
        )

    def _init_orchestrator(self):
        s = self.settings
        estimator = TokenEstimator(provider=s.embedding_provider)

        self.optimizer = PromptOptimizer(
            cache=PromptCache(ttl_seconds=s.prompt_cache_ttl_seconds, max_size=s.prompt_cache_max_size),
            estimator=estimator,
        )
        self.orchestrator = ChatOrchestrator(
            store=self.store,
            retriever=self.retriever,
            optimizer=self.optimizer,
            context_builder=ContextBuilder(max_tokens=s.knowledge_max_tokens, estimator=estimator),
            instructions=PromptTemplates.default_instructions(s.brand_name),
            booking_detector=KeywordBookingChangeDetector(),
            booking_tracker=BookingChangeTracker(
                tracker=self.store.tracker,
                clear_confidence=s.booking_change_clear_confidence,
                show_confidence=s.booking_change_show_confidence,
            ),
            generator=self.generator,
            history_limit=s.history_cap,
            brand_name=s.brand_name,
        )
        logger.info("Chat orchestrator ready")

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.orchestrator is not None

    def health(self) -> dict:
        return {
            "initialized": self._initialized,
            "vector_search": self.vector_search is not None,
            "sessions": len(self.store) if self.store is not None else 0,
            "prompt_cache": self.optimizer.cache.stats() if self.optimizer is not None else None,
        }


_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    return _services


def initialize_services():
    _services.initialize()
