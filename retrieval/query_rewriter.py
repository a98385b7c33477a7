"""
Query Rewriter for the Lagoon Concierge engine.

Decides when a message needs vector search and expands short,
context-dependent follow-ups into self-contained queries using the
session's topic chain, last topic and booking state.
"""

import logging
import re
import unicodedata
from typing import List

from conversation.models import SessionContext
from conversation.session_store import SessionContextStore

from .fragments import KnowledgeFragment

logger = logging.getLogger(__name__)


class QueryRewriter:
    """
    Prepares queries for vector search.

    Rewrite order:
    1. Bare date with booking context -> synthesized booking phrase
    2. Active topic chain
    3. Last topic
    4. Cleaned message
    """

    FOLLOW_UP_OPENERS = re.compile(
        r"^\s*(what about|how about|and|also|what if|tell me more|more about|"
        r"anything else|any other|is that|does that|hva[ðd] me[ðd]|en|og|l[ií]ka)\b",
        re.IGNORECASE,
    )

    FILLER_WORDS = [
        "what about", "how about", "tell me more about", "tell me more", "tell me about",
        "can you", "could you", "please", "i want to know", "just", "also",
        "hvað með", "geturðu", "vinsamlegast",
    ]

    DATE_FILLERS = {"on", "the", "for", "to", "at", "instead", "then", "þann", "á", "í", "til"}

    def __init__(self, short_query_max_tokens: int = 3):
        self.short_query_max_tokens = short_query_max_tokens
        sorted_fillers = sorted(self.FILLER_WORDS, key=len, reverse=True)
        self._filler_pattern = re.compile(
            r'\b(' + '|'.join(re.escape(f) for f in sorted_fillers) + r')\b',
            re.IGNORECASE,
        )

    def needs_vector_search(self, message: str, rule_fragments: List[KnowledgeFragment]) -> bool:
        """Short messages, follow-up openers and rule misses go to vector search."""
        if not rule_fragments:
            return True
        if len(message.split()) <= self.short_query_max_tokens:
            return True
        return bool(self.FOLLOW_UP_OPENERS.search(message))

    def clean(self, message: str) -> str:
        text = unicodedata.normalize("NFC", message).lower()
        text = re.sub(r'[!?.,:;]+(\s|$)', ' ', text)
        text = self._filler_pattern.sub(' ', text)
        return re.sub(r'\s+', ' ', text).strip()

    def bare_date(self, message: str) -> str:
        """The date token if the message is nothing but a date, else ""."""
        match = SessionContextStore.DATE_PATTERN.search(message)
        if not match:
            return ""
        rest = (message[:match.start()] + " " + message[match.end():]).lower()
        rest_words = [w for w in re.findall(r"\w+", rest) if w not in self.DATE_FILLERS]
        return match.group(0) if not rest_words else ""

    def rewrite(self, message: str, context: SessionContext) -> str:
        """
        Rewrite a message into a vector search query.

        Args:
            message: User message
            context: Session context

        Returns:
            Query text
        """
        cleaned = self.clean(message)
        booking = context.booking_context

        date_token = self.bare_date(message)
        if date_token and (booking.has_intent or "booking" in context.topics or booking.dates):
            if context.language == "is":
                query = f"breyta bókun dagsetning {date_token}"
            else:
                query = f"change booking date to {date_token} availability"
            logger.debug(f"Rewrote bare date '{message}' -> '{query}'")
            return query

        if context.active_topic_chain:
            prefix = context.active_topic_chain
        elif context.last_topic:
            prefix = [context.last_topic]
        else:
            return cleaned

        words = cleaned.split()
        terms = [t.replace("_", " ") for t in prefix if t.replace("_", " ") not in words]
        query = " ".join(terms + words)
        logger.debug(f"Rewrote '{message}' -> '{query}'")
        return query
