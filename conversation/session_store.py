"""
Session Context Store for the Lagoon Concierge engine.

Owns per-session conversation state: history, sticky language,
booking dates and late-arrival context. Storage is delegated to a
ContextBackend so the in-process map can be swapped for an external
TTL-capable store.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from .backend import ContextBackend, InMemoryContextBackend
from .errors import MalformedDate, SessionExpired
from .language_detector import LanguageDetector
from .models import DateMention, LanguageDecision, Message, SessionContext
from .topic_tracker import TopicTracker

logger = logging.getLogger(__name__)


_EN_MONTHS = (
    r"january|february|march|april|may|june|july|august|september|october|november|december|"
    r"jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec"
)
_IS_MONTHS = (
    r"jan[uú]ar|febr[uú]ar|mars|apr[ií]l|ma[ií]|j[uú]n[ií]|j[uú]l[ií]|[aá]g[uú]st|"
    r"september|okt[oó]ber|n[oó]vember|desember"
)
_MONTHS = f"{_IS_MONTHS}|{_EN_MONTHS}"


class SessionContextStore:
    """
    Per-session conversation context.

    Responsibilities:
    - One context per session id, created on first access
    - History bounded by history_cap (oldest dropped)
    - Sticky language with target-alphabet override
    - Date mentions and late-arrival hysteresis on user messages
    """

    DATE_PATTERN = re.compile(
        r"\b("
        r"\d{4}-\d{1,2}-\d{1,2}"
        r"|\d{1,2}[./]\d{1,2}(?:[./]\d{2,4})?"
        rf"|\d{{1,2}}(?:st|nd|rd|th)?\.?\s+(?:of\s+)?(?:{_MONTHS})"
        rf"|(?:{_MONTHS})\s+\d{{1,2}}(?:st|nd|rd|th)?"
        r")\b",
        re.IGNORECASE,
    )

    # Icelandic month names rewritten to English before parsing
    MONTH_TRANSLATIONS = {
        r"jan[uú]ar": "january", r"febr[uú]ar": "february", r"mars": "march",
        r"apr[ií]l": "april", r"ma[ií]": "may", r"j[uú]n[ií]": "june",
        r"j[uú]l[ií]": "july", r"[aá]g[uú]st": "august", r"okt[oó]ber": "october",
        r"n[oó]vember": "november", r"desember": "december",
    }

    LATE_ARRIVAL_PATTERN = re.compile(
        r"\b(late|running late|delay\w*|stuck in traffic|traffic|won'?t make it|"
        r"miss(?:ing)? (?:my|our) (?:booking|slot|time)|behind schedule|arriv\w* later|"
        r"sein\w*|of seint|t[oö]f\w*|tefst|umfer[ðd]\w*)\b",
        re.IGNORECASE,
    )
    # "kl. 14.30", "at 9.15": clock times, not day.month
    CLOCK_PREFIX = re.compile(r"(?:\bkl\.?|\bat)\s*$", re.IGNORECASE)
    CLOCK_TIME = re.compile(r"(\d{1,2})\.(\d{2})")

    ANAPHORA_PATTERN = re.compile(r"\b(it|that|this|they|það|þetta)\b", re.IGNORECASE)
    BOOKING_PATTERN = re.compile(r"\b(book\w*|reserv\w*|b[oó]k[au]\w*|panta\w*)\b", re.IGNORECASE)

    SHORT_MESSAGE_MAX_TOKENS = 5

    def __init__(
        self,
        backend: Optional[ContextBackend] = None,
        detector: Optional[LanguageDetector] = None,
        tracker: Optional[TopicTracker] = None,
        history_cap: int = 10,
        short_message_max_tokens: int = SHORT_MESSAGE_MAX_TOKENS,
    ):
        """
        Initialize the store.

        Args:
            backend: Context storage (in-memory with 24h expiry by default)
            detector: Language detector
            tracker: Topic tracker
            history_cap: Maximum messages kept per session
            short_message_max_tokens: Token limit for bare-date detection
        """
        self.backend = backend if backend is not None else InMemoryContextBackend()
        self.detector = detector if detector is not None else LanguageDetector()
        self.tracker = tracker if tracker is not None else TopicTracker()
        self.history_cap = history_cap
        self.short_message_max_tokens = short_message_max_tokens

    @classmethod
    def from_settings(cls, settings, clock=None) -> "SessionContextStore":
        """Build a store wired from application settings."""
        backend_kwargs = {"ttl_seconds": settings.session_ttl_seconds}
        if clock is not None:
            backend_kwargs["clock"] = clock
        return cls(
            backend=InMemoryContextBackend(**backend_kwargs),
            detector=LanguageDetector(
                target_language=settings.target_language,
                default_language=settings.default_language,
                target_chars=settings.target_language_chars,
            ),
            tracker=TopicTracker(reference_memory_size=settings.reference_memory_size),
            history_cap=settings.history_cap,
            short_message_max_tokens=settings.date_check_max_tokens,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def get_or_create(self, session_id: str) -> SessionContext:
        """Return the live context for a session, creating a fresh one if needed."""
        try:
            return self._load(session_id)
        except SessionExpired as e:
            logger.info(f"{e}; starting a fresh context")
            context = SessionContext(session_id=session_id)
            self.backend.put(session_id, context)
            return context

    def _load(self, session_id: str) -> SessionContext:
        context = self.backend.get(session_id)
        if context is None:
            raise SessionExpired(session_id)
        return context

    def expire(self, session_id: str) -> bool:
        """Tear a session down early, cancelling its expiry timer."""
        removed = self.backend.expire(session_id)
        if removed:
            logger.info(f"Session {session_id} expired on request")
        return removed

    def list_sessions(self) -> List[Dict[str, Any]]:
        """Diagnostic summaries of every live session."""
        return [context.to_summary() for _, context in self.backend.items()]

    def __len__(self) -> int:
        return sum(1 for _ in self.backend.items())

    def __contains__(self, session_id: str) -> bool:
        return self.backend.get(session_id) is not None

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def append_message(self, session_id: str, message: Message) -> SessionContext:
        """
        Append a message to the session history.

        Args:
            session_id: Session identifier
            message: Message to append

        Returns:
            The updated context
        """
        context = self.get_or_create(session_id)

        context.messages.append(message)
        overflow = len(context.messages) - self.history_cap
        if overflow > 0:
            del context.messages[:overflow]

        context.message_count += 1
        if message.role == "user":
            context.user_turns += 1
            self._track_booking(context, message.content)
            self._track_late_arrival(context, message.content)

        context.updated_at = datetime.utcnow()
        # put() restarts the inactivity window
        self.backend.put(session_id, context)
        return context

    def add_user_message(self, session_id: str, content: str) -> SessionContext:
        return self.append_message(session_id, Message(role="user", content=content))

    def record_response(self, session_id: str, text: str) -> SessionContext:
        """Append the assistant's reply to the session history."""
        return self.append_message(session_id, Message(role="assistant", content=text))

    def _track_booking(self, context: SessionContext, content: str):
        booking = context.booking_context
        mentions_booking = bool(self.BOOKING_PATTERN.search(content))

        if len(content.split()) <= self.short_message_max_tokens:
            token = self._find_date(content)
            if token:
                has_history = (
                    booking.has_intent
                    or "booking" in context.topics
                    or bool(booking.dates)
                )
                mention = self.parse_date(token)
                booking.dates.append(mention)
                logger.info(f"Date mention '{mention.text}' (session {context.session_id})")

                if has_history:
                    previous = booking.preferred_date
                    if previous is not None and previous.text != mention.text:
                        booking.modifications.append({
                            "previous": previous.text,
                            "new": mention.text,
                            "timestamp": mention.timestamp.isoformat(),
                        })
                        logger.info(
                            f"Booking date changed {previous.text} -> {mention.text} "
                            f"(session {context.session_id})"
                        )
                    booking.preferred_date = mention
                    self.tracker.set_last_topic(context, "booking")

        if mentions_booking:
            booking.has_intent = True

    def _find_date(self, content: str) -> Optional[str]:
        """First date-like token in the message, skipping clock times."""
        for match in self.DATE_PATTERN.finditer(content):
            token = match.group(0)
            if self._is_clock_time(token, content[:match.start()]):
                continue
            return token
        return None

    def _is_clock_time(self, token: str, preceding: str) -> bool:
        if not re.fullmatch(r"\d{1,2}[./]\d{1,2}", token):
            return False
        if self.CLOCK_PREFIX.search(preceding):
            return True
        clock = self.CLOCK_TIME.fullmatch(token)
        if clock is None:
            return False
        hours, minutes = int(clock.group(1)), int(clock.group(2))
        # 15.3 is a date, 14.30 is half past two
        return hours <= 23 and 12 < minutes <= 59

    def parse_date(self, raw: str, today: Optional[datetime] = None) -> DateMention:
        """
        Parse a date-like token.

        Unparseable tokens are kept as raw text rather than dropped.
        """
        try:
            parsed = self._parse_date(raw, today or datetime.utcnow())
        except MalformedDate as e:
            logger.info(str(e))
            return DateMention(raw=raw)
        return DateMention(raw=raw, parsed=parsed)

    def _parse_date(self, raw: str, today: datetime):
        text = raw.lower()
        for pattern, english in self.MONTH_TRANSLATIONS.items():
            text = re.sub(rf"\b{pattern}\b", english, text)
        text = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", text)
        text = re.sub(r"\bof\b", " ", text)
        text = re.sub(r"^(\d{1,2})\.\s", r"\1 ", text)
        if re.fullmatch(r"\d{1,2}[./]\d{1,2}(?:[./]\d{2,4})?", text):
            text = text.replace(".", "/")

        default = datetime(today.year, 1, 1)
        # ISO dates are year-month-day; everything else is day first
        dayfirst = not re.match(r"\d{4}-", text)
        try:
            return date_parser.parse(text, dayfirst=dayfirst, default=default).date()
        except (ValueError, OverflowError) as e:
            raise MalformedDate(raw) from e

    def _track_late_arrival(self, context: SessionContext, content: str):
        late = context.late_arrival_context

        if self.LATE_ARRIVAL_PATTERN.search(content):
            late.is_late = True
            late.last_update = datetime.utcnow()
            self.tracker.set_last_topic(context, "late_arrival")
            logger.info(f"Late arrival flagged (session {context.session_id})")
            return

        if not late.is_late:
            return

        if self.ANAPHORA_PATTERN.search(content) or self.BOOKING_PATTERN.search(content):
            logger.debug(f"Late arrival context kept on follow-up (session {context.session_id})")
            return

        late.is_late = False
        late.last_update = datetime.utcnow()
        logger.info(f"Late arrival cleared (session {context.session_id})")

    # ------------------------------------------------------------------
    # Language & topics
    # ------------------------------------------------------------------

    def update_language(self, session_id: str, message: str) -> LanguageDecision:
        """
        Detect the message language and apply it to the session.

        - Target-alphabet characters always force and lock the target language
        - A high-confidence decision sets and locks its language
        - Otherwise an unlocked session stays "auto" and a locked one keeps its value
        """
        context = self.get_or_create(session_id)
        decision = self.detector.detect(message, context)
        info = context.language_info
        previous = context.language

        if self.detector.has_target_characters(message):
            context.language = self.detector.target_language
            info.is_locked = True
        elif decision.is_high_confidence:
            context.language = decision.language_code
            info.is_locked = True
        elif not info.is_locked:
            context.language = "auto"

        info.confidence = decision.confidence
        info.reason = decision.reason
        info.last_update = datetime.utcnow()

        if context.language != previous:
            logger.info(
                f"Language for session {session_id}: {previous} -> {context.language} "
                f"({decision.reason}, {decision.confidence.value})"
            )
        return decision

    def update_topics(self, session_id: str, message: str) -> List[str]:
        """Detect topics in the message. Returns the newly added ones."""
        context = self.get_or_create(session_id)
        return self.tracker.update_topics(context, message)
