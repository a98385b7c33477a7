"""
Prompt Optimizer for the Lagoon Concierge engine.

Builds a size-bounded instruction payload: the base block, the
category sections relevant to the conversation, a fixed set of
always-on sections and a language directive. Payloads are cached by
(primary intent, last topic, language).
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from conversation.errors import ConfigurationDrift
from conversation.models import SessionContext
from retrieval.token_estimator import TokenEstimator

from .instructions import InstructionSet, SectionId
from .prompt_templates import PromptTemplates

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]


@dataclass
class PromptCacheEntry:
    prompt_text: str
    timestamp: float


class PromptCache:
    """
    Payload cache with a TTL and a size cap.

    Past capacity the oldest entries are evicted first.
    """

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        max_size: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: Dict[CacheKey, PromptCacheEntry] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: CacheKey) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.timestamp < self.ttl_seconds:
            self.hits += 1
            return entry.prompt_text
        if entry is not None:
            del self._entries[key]
        self.misses += 1
        return None

    def put(self, key: CacheKey, prompt_text: str):
        # Re-insert so dict order stays oldest-first
        self._entries.pop(key, None)
        self._entries[key] = PromptCacheEntry(prompt_text=prompt_text, timestamp=self._clock())
        while len(self._entries) > self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            self.evictions += 1

    def clear(self):
        self._entries.clear()

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }


def _words(*terms: str) -> Pattern:
    return re.compile(r'\b(' + '|'.join(terms) + r')\b', re.IGNORECASE)


@dataclass(frozen=True)
class Category:
    """
    A topical instruction section and when to include it.

    topic_keywords are matched against the parts of primary_intent,
    last_topic and every recorded topic (e.g. "book" matches
    "booking_change"); message_pattern is matched against the raw
    message.
    """
    section: SectionId
    topic_keywords: Tuple[str, ...] = ()
    message_pattern: Optional[Pattern] = None
    when: Optional[Callable[[SessionContext], bool]] = None

    def applies(self, message: str, context: SessionContext) -> bool:
        if self.topic_keywords and matches_any_topic(context, self.topic_keywords):
            return True
        if self.message_pattern is not None and self.message_pattern.search(message):
            return True
        return self.when is not None and self.when(context)


def matches_any_topic(context: SessionContext, keywords: Tuple[str, ...]) -> bool:
    """True if any part of the intent, last topic or topic history starts with a keyword."""
    candidates = [context.primary_intent, context.last_topic] + list(context.topics)
    for candidate in candidates:
        if not candidate:
            continue
        for part in candidate.lower().split("_"):
            if any(part.startswith(k) for k in keywords):
                return True
    return False


CATEGORIES: List[Category] = [
    Category(
        SectionId.PRICING,
        ("package", "pricing", "price", "cost", "saman", "sér", "ser", "pure"),
        _words(r"prices?", r"costs?", r"how much", r"isk", r"ver[ðd]\w*", r"kosta\w*", r"fyrir einn", r"fyrir tvo"),
    ),
    Category(
        SectionId.RITUAL,
        ("ritual", "ritúal", "skjól", "skjol", "steps"),
        _words(r"ritual", r"rit[uú]al\w*", r"skj[oó]l", r"steps?", r"seven"),
    ),
    Category(
        SectionId.CANCELLATION,
        ("cancel", "refund", "change", "modification", "reschedule"),
        _words(r"cancel\w*", r"refund\w*", r"reschedul\w*", r"change my", r"afb[oó]k\w*", r"endurgrei[ðd]\w*", r"breyt\w*"),
    ),
    Category(
        SectionId.BOOKING,
        ("book", "reserv", "ticket", "purchase"),
        _words(r"book\w*", r"reserv\w*", r"availab\w*", r"b[oó]k[au]\w*", r"panta\w*"),
    ),
    Category(
        SectionId.LATE_ARRIVAL,
        ("late", "delay", "arrival", "grace"),
        _words(r"late", r"delay\w*", r"grace period", r"sein\w*"),
        when=lambda context: context.late_arrival_context.is_late,
    ),
    Category(
        SectionId.HOURS,
        ("hour", "open", "clos", "schedule"),
        _words(r"hours?", r"open\w*", r"clos\w*", r"opi[ðn]\w*", r"loka\w*"),
    ),
    Category(
        SectionId.GROUPS,
        ("group", "team", "corporate", "party", "celebration"),
        _words(r"groups?", r"team", r"corporate", r"party", r"h[oó]p\w*"),
    ),
    Category(
        SectionId.TRANSPORT,
        ("transport", "transfer", "bus", "shuttle", "drive", "location", "directions"),
        _words(r"bus", r"shuttle", r"transport\w*", r"transfer", r"directions", r"address", r"str[aæ]t[oó]"),
    ),
    Category(
        SectionId.DISCOUNTS,
        ("discount", "promo", "coupon", "offer", "deal"),
        _words(r"discount\w*", r"promo\w*", r"coupon\w*", r"deals?", r"afsl[aá]tt\w*"),
    ),
    Category(
        SectionId.PRODUCTS,
        ("product", "shop", "souvenir", "shipping"),
        _words(r"products?", r"shop\w*", r"souvenirs?", r"scrub", r"lotion", r"v[oö]rur"),
    ),
    Category(
        SectionId.AMENITIES,
        ("amenit", "facilit", "locker", "shower", "changing", "towel", "robe"),
        _words(r"amenit\w*", r"facilit\w*", r"lockers?", r"showers?", r"changing", r"towels?", r"robes?"),
    ),
    Category(
        SectionId.GIFT_CARDS,
        ("gift", "voucher", "gjafakort"),
        _words(r"gift\w*", r"vouchers?", r"gjafa\w*"),
    ),
    Category(
        SectionId.AGE,
        ("age", "child", "kids", "minimum"),
        _words(r"age", r"child\w*", r"kids?", r"minimum age", r"how old", r"aldur\w*", r"b[oö]rn\w*", r"barn\w*"),
    ),
    Category(
        SectionId.DATE_NIGHT,
        message_pattern=_words(r"date night", r"for two", r"couples?", r"romantic", r"stefnum[oó]t\w*"),
    ),
    Category(
        SectionId.ICELANDIC_GUIDELINES,
        when=lambda context: context.language == "is",
    ),
]

ALWAYS_SECTIONS: Tuple[SectionId, ...] = (
    SectionId.CONTEXT_AWARENESS,
    SectionId.VOICE_AND_TONE,
    SectionId.PERSONAL_LANGUAGE,
)


class PromptOptimizer:
    """
    Selects the instruction sections needed for a turn.

    Payload layout:
    1. Base block (everything up to and including CRITICAL_RULES)
    2. Category sections whose predicate holds
    3. CONTEXT_AWARENESS, VOICE_AND_TONE, PERSONAL_LANGUAGE
    4. Language directive
    """

    def __init__(
        self,
        cache: Optional[PromptCache] = None,
        estimator: Optional[TokenEstimator] = None,
        categories: Optional[List[Category]] = None,
    ):
        self.cache = cache if cache is not None else PromptCache()
        self.estimator = estimator if estimator is not None else TokenEstimator()
        self.categories = categories if categories is not None else CATEGORIES
        self._fingerprint: Optional[str] = None

    @staticmethod
    def cache_key(context: SessionContext) -> CacheKey:
        return (context.primary_intent or "general", context.last_topic or "", context.language)

    def optimize(self, instructions: InstructionSet, message: str, context: SessionContext) -> str:
        """
        Build the instruction payload for a turn.

        Args:
            instructions: Complete instruction set
            message: Raw user message
            context: Session context

        Returns:
            Payload text; the complete instructions if base sections are missing
        """
        if instructions.fingerprint != self._fingerprint:
            if self._fingerprint is not None:
                logger.info("Instruction set changed, clearing prompt cache")
            self.cache.clear()
            self._fingerprint = instructions.fingerprint

        key = self.cache_key(context)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Prompt cache hit for {key}")
            return cached

        try:
            base = instructions.base_block()
        except ConfigurationDrift as e:
            logger.warning(f"{e}; using the complete instruction set")
            return instructions.full_text()

        selected: List[SectionId] = []
        for category in self.categories:
            if category.section not in selected and category.applies(message, context):
                selected.append(category.section)
        for section_id in ALWAYS_SECTIONS:
            if section_id not in selected:
                selected.append(section_id)

        parts = [base]
        for section_id in selected:
            if section_id not in instructions:
                logger.debug(f"Section '{section_id.value}' not in instruction set, skipping")
                continue
            parts.append(instructions.render(section_id))
        parts.append(PromptTemplates.language_directive(context.language))

        payload = "\n\n".join(parts)
        self._log_savings(instructions, payload, selected)
        self.cache.put(key, payload)
        return payload

    def _log_savings(self, instructions: InstructionSet, payload: str, selected: List[SectionId]):
        original = self.estimator.estimate(instructions.full_text())
        optimized = self.estimator.estimate(payload)
        saved = original - optimized
        percent = round(saved / original * 100) if original else 0
        logger.info(
            f"Prompt optimized: {original} -> {optimized} tokens ({percent}% saved), "
            f"sections={[s.value for s in selected]}"
        )
