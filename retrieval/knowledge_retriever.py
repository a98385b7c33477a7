"""
Knowledge Retriever for the Lagoon Concierge engine.

Combines deterministic rule matching with vector similarity search
behind one async interface.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from conversation.models import SessionContext

from .fragments import KnowledgeFragment, render_content
from .query_rewriter import QueryRewriter
from .rule_matcher import RuleMatcher
from .vector_search import VectorSearch

logger = logging.getLogger(__name__)


class KnowledgeRetriever:
    """
    Hybrid retrieval.

    Rule fragments come first (exact facts), then vector fragments by
    descending similarity. Vector matches that repeat rule content are
    dropped.
    """

    def __init__(
        self,
        matcher: RuleMatcher,
        rewriter: Optional[QueryRewriter] = None,
        vector_search: Optional[VectorSearch] = None,
        top_k: int = 5,
        min_similarity: float = 0.5,
    ):
        self.matcher = matcher
        self.rewriter = rewriter if rewriter is not None else QueryRewriter()
        self.vector_search = vector_search
        self.top_k = top_k
        self.min_similarity = min_similarity

    async def retrieve(self, message: str, context: SessionContext) -> List[KnowledgeFragment]:
        """
        Retrieve knowledge for a message.

        Args:
            message: User message
            context: Session context

        Returns:
            Ordered fragments (rule first, then vector)
        """
        rule_fragments = await self.match_rules(message, context)

        vector_fragments: List[KnowledgeFragment] = []
        if self.vector_search is not None and self.rewriter.needs_vector_search(message, rule_fragments):
            query = self.rewriter.rewrite(message, context)
            matches = await self._search(query, context)
            vector_fragments = self._normalize(matches, rule_fragments)

        logger.info(
            f"Retrieved {len(rule_fragments)} rule + {len(vector_fragments)} vector fragments "
            f"for session {context.session_id}"
        )
        return rule_fragments + vector_fragments

    async def _search(self, query: str, context: SessionContext) -> List[Dict[str, Any]]:
        try:
            return await self.vector_search.search(
                query,
                top_k=self.top_k,
                min_similarity=self.min_similarity,
                language=context.language,
            )
        except Exception as e:
            logger.warning(f"Vector search failed for session {context.session_id}, using rules only: {e}")
            return []

    async def match_rules(self, message: str, context: SessionContext) -> List[KnowledgeFragment]:
        return self.matcher.match(message, context)

    def _normalize(
        self, matches: List[Dict[str, Any]], rule_fragments: List[KnowledgeFragment]
    ) -> List[KnowledgeFragment]:
        rule_text = " ".join(_squash(f.text) for f in rule_fragments)

        fragments = []
        for match in matches:
            content = match.get("content")
            text = render_content(content) if content is not None else ""
            if not text.strip() or _squash(text) in rule_text:
                continue
            metadata = dict(match.get("metadata") or {})
            fragments.append(KnowledgeFragment(
                type=metadata.get("type", "vector"),
                subtype=metadata.get("section"),
                content=content,
                similarity=float(match.get("similarity", 0.0)),
                metadata=metadata,
            ))

        fragments.sort(key=lambda f: f.similarity, reverse=True)
        return fragments


def _squash(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip().lower()
