"""
Context Builder for the Lagoon Concierge engine.

Renders retrieved fragments into a knowledge block for the generation
call, bounded by a token budget.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .fragments import KnowledgeFragment
from .token_estimator import TokenEstimator

logger = logging.getLogger(__name__)


@dataclass
class KnowledgeBlock:
    """Rendered knowledge for one turn."""
    text: str
    fragment_count: int = 0
    total_tokens: int = 0
    truncated: bool = False
    sources: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "fragment_count": self.fragment_count,
            "total_tokens": self.total_tokens,
            "truncated": self.truncated,
            "sources": self.sources,
        }


class ContextBuilder:
    """
    Builds the knowledge block.

    Fragments are rendered in the order given; the one that crosses the
    budget is cut down if enough room remains, otherwise rendering stops.
    """

    MIN_PARTIAL_TOKENS = 100

    def __init__(self, max_tokens: int = 3000, estimator: Optional[TokenEstimator] = None):
        """
        Args:
            max_tokens: Token budget for the block
            estimator: Token estimator (heuristic by default)
        """
        self.max_tokens = max_tokens
        self.estimator = estimator if estimator is not None else TokenEstimator()

    def build(self, fragments: List[KnowledgeFragment]) -> KnowledgeBlock:
        """
        Render fragments into a knowledge block.

        Args:
            fragments: Ordered fragments from the retriever

        Returns:
            KnowledgeBlock (empty text when nothing was retrieved)
        """
        if not fragments:
            return KnowledgeBlock(text="")

        parts = []
        sources = []
        total_tokens = 0
        truncated = False

        for fragment in fragments:
            body = fragment.text.strip()
            if not body:
                continue

            section = f"[{self._label(fragment)}]\n{body}"
            tokens = self.estimator.estimate(section)

            if total_tokens + tokens > self.max_tokens:
                truncated = True
                remaining = self.max_tokens - total_tokens
                if remaining < self.MIN_PARTIAL_TOKENS:
                    break
                # ~4 chars per token
                section = section[:remaining * 4].rstrip() + " ..."
                tokens = self.estimator.estimate(section)

            parts.append(section)
            total_tokens += tokens
            sources.append({
                "type": fragment.type,
                "subtype": fragment.subtype,
                "similarity": fragment.similarity,
                "rule": fragment.metadata.get("rule"),
            })
            if truncated:
                break

        if truncated:
            logger.info(f"Knowledge block truncated at {total_tokens} tokens ({len(parts)}/{len(fragments)} fragments)")

        return KnowledgeBlock(
            text="\n\n".join(parts),
            fragment_count=len(parts),
            total_tokens=total_tokens,
            truncated=truncated,
            sources=sources,
        )

    @staticmethod
    def _label(fragment: KnowledgeFragment) -> str:
        label = fragment.type if not fragment.subtype else f"{fragment.type}/{fragment.subtype}"
        if fragment.is_vector:
            label += f" (similarity {fragment.similarity:.2f})"
        return label

    def format_for_prompt(self, block: KnowledgeBlock) -> str:
        """Wrap the block for inclusion in the generation payload."""
        if not block.text:
            return ""
        return f"<knowledge>\n{block.text}\n</knowledge>"
