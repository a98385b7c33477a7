"""
Conversation state for the Lagoon Concierge engine.
"""

from .backend import ContextBackend, InMemoryContextBackend
from .booking_change import (
    BookingChangeTracker,
    BookingFormDecision,
    BookingIntentDetector,
    BookingSignal,
    KeywordBookingChangeDetector,
)
from .errors import (
    AssistantError,
    ConfigurationDrift,
    MalformedDate,
    RetrievalUnavailable,
    SessionExpired,
)
from .language_detector import LanguageDetector
from .models import (
    BookingContext,
    Confidence,
    DateMention,
    LanguageDecision,
    Message,
    SessionContext,
)
from .session_store import SessionContextStore
from .topic_tracker import TopicTracker

__all__ = [
    "AssistantError",
    "BookingChangeTracker",
    "BookingContext",
    "BookingFormDecision",
    "BookingIntentDetector",
    "BookingSignal",
    "Confidence",
    "ConfigurationDrift",
    "ContextBackend",
    "DateMention",
    "InMemoryContextBackend",
    "KeywordBookingChangeDetector",
    "LanguageDecision",
    "LanguageDetector",
    "MalformedDate",
    "Message",
    "RetrievalUnavailable",
    "SessionContext",
    "SessionContextStore",
    "SessionExpired",
    "TopicTracker",
]
