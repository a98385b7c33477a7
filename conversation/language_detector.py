"""
Language Detection for the Lagoon Concierge engine.

Stateless classifier: decides whether an utterance is written in the
target language (Icelandic) and how confident that call is. Stickiness
across turns is handled by the session store, not here.
"""

import logging
import re
from typing import Iterable, Optional

from .models import Confidence, LanguageDecision, SessionContext

logger = logging.getLogger(__name__)


class LanguageDetector:
    """
    Detects the language of a user message.

    Pipeline:
    1. Lowercase and strip brand / product / place vocabulary
    2. Target-alphabet characters remaining -> target language, high
    3. Whole-message target acknowledgment -> target language, high
    4. Full default-language sentence -> default language, high
    5. Anything else -> "auto" with low/medium confidence
    """

    # Proper nouns that carry target-alphabet characters but say nothing
    # about the language the guest is writing in
    BRAND_VOCABULARY = [
        "sky lagoon", "sky pass", "pure pass", "sér pass", "saman pass",
        "sér", "ser", "saman", "skjól", "skjol", "ritúal", "ritual",
        "gelmir", "keimur", "smakk", "sky",
        "reykjavík", "reykjavik", "kópavogur", "kopavogur", "keflavík",
        "keflavik", "kársnes", "kársnesbraut", "hafnarfjörður",
        "bsí", "strætó", "hamraborg", "hlemmur", "perlan", "harpa",
        "hallgrímskirkja", "þingvellir", "gullfoss", "geysir",
    ]

    # Short replies that are unambiguously Icelandic even without special characters
    TARGET_ACKNOWLEDGMENTS = {
        "takk", "takk fyrir", "takk kærlega", "nei", "nei takk", "ok takk",
        "okei takk", "oki takk", "flott", "flott takk", "gott", "snilld",
        "snilld takk", "snillingur", "jam", "jamm", "geggjað", "magnað",
        "skil", "bara", "allt í lagi", "æði", "kærar þakkir",
    }

    DEFAULT_MARKERS = {
        "the", "is", "are", "what", "where", "when", "how", "who", "can",
        "do", "does", "your", "you", "have", "has", "will", "would",
        "should", "could", "and", "but", "or", "in", "at", "to", "from",
        "with", "about", "need", "want", "much", "many", "which", "for",
        "my", "our", "we", "i", "me", "please", "there", "it", "this",
        "that", "of", "a", "an", "if", "any", "tell",
    }

    DEFAULT_SENTENCE_MIN_MARKERS = 3

    def __init__(
        self,
        target_language: str = "is",
        default_language: str = "en",
        target_chars: str = "áðéíóúýþæö",
        brand_vocabulary: Optional[Iterable[str]] = None,
    ):
        self.target_language = target_language
        self.default_language = default_language
        self.target_chars = target_chars

        vocabulary = list(brand_vocabulary) if brand_vocabulary is not None else self.BRAND_VOCABULARY
        # Longest first so multi-word names win over their parts
        sorted_terms = sorted(vocabulary, key=len, reverse=True)
        self._brand_pattern = re.compile(
            r'\b(' + '|'.join(re.escape(t) for t in sorted_terms) + r')\b',
            re.IGNORECASE,
        )
        self._target_char_pattern = re.compile(f"[{re.escape(target_chars)}]", re.IGNORECASE)

    def strip_vocabulary(self, message: str) -> str:
        """Lowercase the message and remove brand/product/place names."""
        cleaned = self._brand_pattern.sub(" ", message.lower())
        return re.sub(r'\s+', ' ', cleaned).strip()

    def has_target_characters(self, message: str) -> bool:
        """True if target-alphabet characters survive vocabulary stripping."""
        return bool(self._target_char_pattern.search(self.strip_vocabulary(message)))

    def detect(self, message: str, context: Optional[SessionContext] = None) -> LanguageDecision:
        """
        Classify a message.

        Args:
            message: Raw user utterance
            context: Optional session context (only used for logging)

        Returns:
            LanguageDecision
        """
        cleaned = self.strip_vocabulary(message or "")

        if self._target_char_pattern.search(cleaned):
            return self._target(Confidence.HIGH, "target_characters")

        normalized = re.sub(r'[:;]-?[()dp]', '', cleaned)
        normalized = re.sub(r'[!?.,]+', ' ', normalized).strip()
        normalized = re.sub(r'\s+', ' ', normalized)

        if normalized in self.TARGET_ACKNOWLEDGMENTS:
            return self._target(Confidence.HIGH, "target_acknowledgment")

        words = normalized.split()
        marker_count = sum(1 for w in words if w in self.DEFAULT_MARKERS)

        if marker_count >= self.DEFAULT_SENTENCE_MIN_MARKERS:
            return LanguageDecision(
                is_target_language=False,
                confidence=Confidence.HIGH,
                reason="default_sentence",
                language_code=self.default_language,
            )

        confidence = Confidence.MEDIUM if marker_count else Confidence.LOW
        if context is not None:
            logger.debug(
                f"Language undetermined for session {context.session_id}: "
                f"'{message[:40]}' ({confidence.value})"
            )
        return LanguageDecision(
            is_target_language=False,
            confidence=confidence,
            reason="undetermined",
            language_code="auto",
        )

    def _target(self, confidence: Confidence, reason: str) -> LanguageDecision:
        return LanguageDecision(
            is_target_language=True,
            confidence=confidence,
            reason=reason,
            language_code=self.target_language,
        )
