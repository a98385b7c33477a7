"""
Topic & Intent Tracking for the Lagoon Concierge engine.

Derives topic tags from user messages and maintains the structured
sub-contexts that depend on them (topic chain, reference memory,
time context). Mutates the session context in place.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from .models import ContextualReference, SessionContext

logger = logging.getLogger(__name__)


def _words(*terms: str) -> re.Pattern:
    return re.compile(r'\b(' + '|'.join(terms) + r')\b', re.IGNORECASE)


class TopicTracker:
    """
    Tracks conversation topics for a session.

    - Topic membership is add-once, in insertion order
    - last_topic follows the most recent match
    - primary_intent is the highest-priority topic of the current turn
    - related terms chain a follow-up onto the current topic
    """

    # Ordered: table order decides primary_intent when several topics match
    TOPIC_PATTERNS: List[Tuple[str, re.Pattern]] = [
        ("ritual", _words(r"ritual", r"rit[uú]al", r"skj[oó]l")),
        ("packages", _words(r"packages?", r"pakk\w*", r"saman", r"s[ée]r", r"pure", r"sky pass")),
        ("pricing", _words(r"prices?", r"pricing", r"costs?", r"how much", r"expensive", r"cheap\w*",
                           r"ver[ðd]\w*", r"kosta\w*")),
        ("hours", _words(r"hours?", r"open\w*", r"clos\w*", r"opi[ðn]\w*", r"loka\w*", r"afgrei[ðd]slut[ií]m\w*")),
        ("transportation", _words(r"transport\w*", r"bus", r"buses", r"shuttle", r"transfer", r"driv\w*",
                                  r"parking", r"get there", r"str[aæ]t[oó]", r"r[uú]ta\w*")),
        ("dining", _words(r"restaurant", r"food", r"eat\w*", r"drinks?", r"din(e|ing)", r"menu", r"bar",
                          r"caf[eé]", r"matur\w*", r"veitinga\w*")),
        ("facilities", _words(r"facilit\w*", r"changing", r"showers?", r"lockers?", r"towels?", r"robes?",
                              r"b[uú]ningsklef\w*", r"handkl[æa]\w*")),
        ("booking", _words(r"book\w*", r"reserv\w*", r"b[oó]k[au]\w*", r"panta\w*")),
        ("gift_cards", _words(r"gift\w*", r"vouchers?", r"gjafa\w*")),
        ("age_policy", _words(r"age", r"ages", r"child", r"children", r"kids?", r"teen\w*",
                              r"aldur\w*", r"b[oö]rn\w*", r"barn\w*")),
        ("groups", _words(r"groups?", r"team", r"corporate", r"company", r"h[oó]p\w*")),
        ("weather", _words(r"weather", r"rain\w*", r"snow\w*", r"wind\w*", r"ve[ðd]ur\w*", r"rigning\w*")),
        ("products", _words(r"products?", r"scrub", r"shop", r"souvenirs?", r"skin care", r"v[oö]rur")),
    ]

    # Follow-up terms that extend the current topic into a chain
    RELATED_TOPICS: Dict[str, List[str]] = {
        "ritual": ["steps", "step", "sauna", "cold plunge", "mist", "scrub", "duration", "how long", "skref"],
        "packages": ["saman", "sér", "ser", "difference", "included", "upgrade", "for two", "munur"],
        "pricing": ["children", "kids", "for two", "per person", "discount", "weekend", "weekday"],
        "transportation": ["bus", "pickup", "pick up", "bsí", "hotel", "airport", "schedule", "taxi"],
        "hours": ["closing", "last entry", "weekend", "holiday", "christmas", "summer", "winter"],
        "dining": ["menu", "vegan", "vegetarian", "gluten", "drinks"],
        "booking": ["date", "time", "change", "cancel", "availability", "tomorrow", "today"],
        "facilities": ["towel", "locker", "shower", "hairdryer", "swimsuit", "wheelchair"],
    }

    REFERENCE_PATTERN = re.compile(
        r"\b(you (mentioned|said|told me)|as you said|like you said|earlier|previously|"
        r"go back to|you were saying|[aá][ðd]an|þú nefndir|sem þú sagðir)\b",
        re.IGNORECASE,
    )

    TIME_PATTERN = re.compile(
        r"\b(\d{1,2}:\d{2}\s*(?:am|pm)?|\d{1,2}\s*(?:am|pm)|kl\.?\s*\d{1,2}(?:[:.]\d{2})?|at \d{1,2}(?:[:.]\d{2})?)\b",
        re.IGNORECASE,
    )
    BOOKING_TIME_PATTERN = _words(r"book\w*", r"reserv\w*", r"b[oó]k[au]\w*", r"panta\w*", r"arriv\w*", r"slot")
    ACTIVITY_PATTERN = _words(r"lagoon", r"ritual", r"dinner", r"lunch", r"restaurant", r"bar", r"caf[eé]",
                              r"sauna", r"swim\w*", r"l[oó]n\w*", r"kv[oö]ldmat\w*")
    SEQUENCE_MARKERS = _words(r"then", r"after\w*", r"before", r"first", r"next", r"s[ií][ðd]an", r"eftir", r"fyrst")

    MAX_SEQUENCE = 10

    def __init__(self, reference_memory_size: int = 5):
        self.reference_memory_size = reference_memory_size

    def update_topics(self, context: SessionContext, message: str) -> List[str]:
        """
        Detect topics in a message and update the context.

        Args:
            context: Session context (mutated)
            message: User message

        Returns:
            Topics added to the context by this message
        """
        new_topics = []
        turn_intent: Optional[str] = None

        for topic, pattern in self.TOPIC_PATTERNS:
            if not pattern.search(message):
                continue
            if turn_intent is None:
                turn_intent = topic
            if topic not in context.topics:
                context.topics.append(topic)
                self.set_last_topic(context, topic)
                new_topics.append(topic)
                logger.info(f"New topic detected: '{topic}' (session {context.session_id})")

        context.primary_intent = turn_intent

        self._update_topic_chain(context, message)
        self._detect_reference(context, message)
        self.update_time_context(context, message)

        return new_topics

    def set_last_topic(self, context: SessionContext, topic: str):
        """Make a topic current and refresh the rolling reference memory."""
        context.last_topic = topic
        memory = context.reference_memory
        if topic in memory:
            memory.remove(topic)
        memory.append(topic)
        while len(memory) > self.reference_memory_size:
            memory.pop(0)

    def add_topic(self, context: SessionContext, topic: str):
        """Record a topic set by something other than the pattern table."""
        if topic not in context.topics:
            context.topics.append(topic)
        self.set_last_topic(context, topic)

    def _update_topic_chain(self, context: SessionContext, message: str):
        last_topic = context.last_topic
        if context.active_topic_chain and context.active_topic_chain[0] != last_topic:
            context.active_topic_chain = []

        related = self.RELATED_TOPICS.get(last_topic or "")
        if not related:
            return

        lowered = message.lower()
        for term in related:
            if re.search(r'\b' + re.escape(term) + r'\b', lowered):
                context.active_topic_chain = [last_topic, term]
                logger.debug(f"Topic chain: {context.active_topic_chain}")
                return

    def _detect_reference(self, context: SessionContext, message: str):
        if self.REFERENCE_PATTERN.search(message):
            context.contextual_reference = ContextualReference(topic=context.last_topic)
            logger.info(
                f"Contextual reference to '{context.last_topic}' "
                f"(recent topics: {context.reference_memory})"
            )

    def update_time_context(self, context: SessionContext, message: str):
        """Track clock times and activity ordering mentioned in the message."""
        time_context = context.time_context
        times = [m.group(0).strip() for m in self.TIME_PATTERN.finditer(message)]

        if times:
            time_context.last_discussed_time = times[-1]
            if self.BOOKING_TIME_PATTERN.search(message):
                time_context.booking_time = times[0]

        activities = [m.group(0).lower() for m in self.ACTIVITY_PATTERN.finditer(message)]
        if activities and (len(activities) > 1 or self.SEQUENCE_MARKERS.search(message)):
            for activity in activities:
                if not time_context.sequence or time_context.sequence[-1] != activity:
                    time_context.sequence.append(activity)
            del time_context.sequence[:-self.MAX_SEQUENCE]

        if times or activities:
            logger.debug(
                f"Time context: booking={time_context.booking_time}, "
                f"last={time_context.last_discussed_time}, sequence={time_context.sequence}"
            )
