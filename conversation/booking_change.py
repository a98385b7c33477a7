"""
Booking-change intent handling for the Lagoon Concierge engine.

Merges signals from a booking-intent detector into the session's
booking context and decides whether to surface the booking-change
form. The policy is AND-of-allow / OR-of-deny: weak signals never
flip state, and any deny condition vetoes the form.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from .models import SessionContext
from .topic_tracker import TopicTracker

logger = logging.getLogger(__name__)


@dataclass
class BookingSignal:
    """Output of a booking-intent detector."""
    should_show_form: bool
    confidence: float
    is_within_agent_hours: bool = True


@dataclass
class BookingFormDecision:
    """Whether to surface the booking-change form this turn."""
    should_show: bool
    reason: str
    confidence: float
    is_within_agent_hours: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "should_show": self.should_show,
            "reason": self.reason,
            "confidence": self.confidence,
            "is_within_agent_hours": self.is_within_agent_hours,
        }


@runtime_checkable
class BookingIntentDetector(Protocol):
    """Protocol for booking-change classifiers."""

    async def detect(self, message: str, context: SessionContext) -> BookingSignal:
        """Classify whether the message asks to change an existing booking."""
        ...


COMPARISON_PATTERN = re.compile(
    r"\b(difference|differences|differ|compare|comparing|comparison|versus|vs|"
    r"which (?:one )?is better|munur\w*|muninn|mismun\w*|samanbur\w*)\b",
    re.IGNORECASE,
)
PRICING_PATTERN = re.compile(
    r"\b(price|prices|pricing|cost|costs|how much|ver[ðd]\w*|kosta\w*)\b",
    re.IGNORECASE,
)
CHANGE_PATTERN = re.compile(
    r"\b(change|chang\w+|modify|reschedul\w*|move|postpone|cancel\w*|switch|"
    r"breyt\w*|f[æa]ra|fresta|afb[oó]k\w*)\b",
    re.IGNORECASE,
)
BOOKING_OBJECT_PATTERN = re.compile(
    r"\b(book\w*|reserv\w*|tickets?|slot|time|date|b[oó]kun\w*|t[ií]ma\w*|dagsetning\w*|mi[ðd]a\w*)\b",
    re.IGNORECASE,
)


def is_comparison_question(message: str) -> bool:
    return bool(COMPARISON_PATTERN.search(message or ""))


def is_pricing_question(message: str) -> bool:
    """A pricing question that does not also ask to change anything."""
    message = message or ""
    return bool(PRICING_PATTERN.search(message)) and not CHANGE_PATTERN.search(message)


class KeywordBookingChangeDetector:
    """
    Rule-based booking-change detector.

    Positive when a change verb appears together with a booking object.
    Agent hours are 09-18 on weekdays and 09-16 on weekends (GMT).
    """

    WEEKDAY_HOURS = (9, 18)
    WEEKEND_HOURS = (9, 16)

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or (lambda: datetime.now(timezone.utc))

    def is_within_agent_hours(self, moment: Optional[datetime] = None) -> bool:
        moment = moment or self._now()
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        start, end = self.WEEKEND_HOURS if moment.weekday() >= 5 else self.WEEKDAY_HOURS
        return start <= moment.hour < end

    async def detect(self, message: str, context: SessionContext) -> BookingSignal:
        has_change = bool(CHANGE_PATTERN.search(message))
        has_object = bool(BOOKING_OBJECT_PATTERN.search(message))
        within_hours = self.is_within_agent_hours()

        if is_comparison_question(message):
            return BookingSignal(False, 0.9, within_hours)
        if has_change and has_object:
            return BookingSignal(True, 0.9, within_hours)
        if has_change and context.booking_context.has_intent:
            return BookingSignal(True, 0.75, within_hours)
        if has_change:
            return BookingSignal(False, 0.5, within_hours)
        return BookingSignal(False, 0.3, within_hours)


class BookingChangeTracker:
    """
    Applies booking-change signals to a session.

    Thresholds are heuristic and kept configurable.
    """

    def __init__(
        self,
        tracker: Optional[TopicTracker] = None,
        clear_confidence: float = 0.7,
        show_confidence: float = 0.8,
    ):
        self.tracker = tracker if tracker is not None else TopicTracker()
        self.clear_confidence = clear_confidence
        self.show_confidence = show_confidence

    def merge(self, context: SessionContext, message: str, signal: BookingSignal) -> bool:
        """
        Merge a detector signal into the booking context.

        Args:
            context: Session context (mutated)
            message: Current user message
            signal: Detector output

        Returns:
            The resulting has_change_intent
        """
        booking = context.booking_context

        if signal.should_show_form:
            booking.has_change_intent = True
            booking.change_confidence = signal.confidence
            self.tracker.add_topic(context, "booking_change")
            logger.info(
                f"Booking change intent set ({signal.confidence:.2f}) "
                f"for session {context.session_id}"
            )
        elif (
            signal.confidence > self.clear_confidence
            or is_comparison_question(message)
            or is_pricing_question(message)
        ):
            if booking.has_change_intent:
                logger.info(f"Booking change intent cleared for session {context.session_id}")
            booking.has_change_intent = False
            booking.change_confidence = 0.0
        else:
            logger.debug(f"Weak booking signal ({signal.confidence:.2f}), keeping prior state")

        return booking.has_change_intent

    def decide(
        self,
        context: SessionContext,
        signal: BookingSignal,
        message: Optional[str] = None,
    ) -> BookingFormDecision:
        """Decide whether to surface the booking-change form."""
        booking = context.booking_context
        last_message = message if message is not None else (context.last_user_message() or "")

        allowed = signal.should_show_form or (
            booking.has_change_intent and booking.change_confidence >= self.show_confidence
        )
        reason = "explicit_signal" if signal.should_show_form else "sustained_intent"

        if not allowed:
            reason = "no_intent"
        elif "packages" in context.topics and "booking_change" not in context.topics:
            allowed, reason = False, "package_discussion"
        elif is_comparison_question(last_message):
            allowed, reason = False, "comparison_question"
        elif is_pricing_question(last_message):
            allowed, reason = False, "pricing_question"

        return BookingFormDecision(
            should_show=allowed,
            reason=reason,
            confidence=max(signal.confidence, booking.change_confidence) if allowed else 0.0,
            is_within_agent_hours=signal.is_within_agent_hours,
        )
