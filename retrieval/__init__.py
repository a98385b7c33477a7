"""
Retrieval Module for the Lagoon Concierge engine.

- Static content store and declarative rule matching
- Query rewriting for short follow-ups
- Embedding generation (Bedrock/OpenAI) and Pinecone vector search
- Hybrid knowledge retrieval and knowledge block rendering
"""

from .content_store import StaticContentStore
from .context_builder import ContextBuilder, KnowledgeBlock
from .embedder import EmbeddingProvider, EmbeddingService
from .fragments import KnowledgeFragment
from .knowledge_retriever import KnowledgeRetriever
from .pinecone_client import PineconeClient, SearchResult
from .query_rewriter import QueryRewriter
from .rule_matcher import RuleMatcher
from .rules import RULES, Rule
from .token_estimator import TokenEstimator
from .vector_search import SearchResultCache, VectorSearchService

__all__ = [
    "ContextBuilder",
    "EmbeddingProvider",
    "EmbeddingService",
    "KnowledgeBlock",
    "KnowledgeFragment",
    "KnowledgeRetriever",
    "PineconeClient",
    "QueryRewriter",
    "RULES",
    "Rule",
    "RuleMatcher",
    "SearchResult",
    "SearchResultCache",
    "StaticContentStore",
    "TokenEstimator",
    "VectorSearchService",
]
