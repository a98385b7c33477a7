"""
Conversation data model for the Lagoon Concierge engine.

Holds the per-session state that survives between turns, plus the
ephemeral language decision produced by the detector.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Confidence(Enum):
    """Language detector confidence levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class LanguageDecision:
    """Result of a single language detection. Never stored on its own."""
    is_target_language: bool
    confidence: Confidence
    reason: str
    language_code: str

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence == Confidence.HIGH


@dataclass
class Message:
    """One entry in the conversation history."""
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, str]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class LanguageInfo:
    """Details of the last language update."""
    is_locked: bool = False
    confidence: Confidence = Confidence.MEDIUM
    reason: str = "default"
    last_update: datetime = field(default_factory=datetime.utcnow)


@dataclass
class DateMention:
    """A date the user mentioned. `parsed` is None when parsing failed."""
    raw: str
    parsed: Optional[date] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def text(self) -> str:
        return self.parsed.isoformat() if self.parsed else self.raw


@dataclass
class BookingContext:
    has_intent: bool = False
    dates: List[DateMention] = field(default_factory=list)
    preferred_date: Optional[DateMention] = None
    modifications: List[Dict[str, Any]] = field(default_factory=list)
    has_change_intent: bool = False
    change_confidence: float = 0.0


@dataclass
class LateArrivalContext:
    is_late: bool = False
    last_update: Optional[datetime] = None


@dataclass
class TimeContext:
    booking_time: Optional[str] = None
    sequence: List[str] = field(default_factory=list)
    last_discussed_time: Optional[str] = None


@dataclass
class ContextualReference:
    """User referred back to something discussed earlier."""
    topic: Optional[str]
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class SessionContext:
    """
    Conversation state for one session.

    Invariants maintained by the store and tracker:
    - len(messages) never exceeds the configured history cap
    - topics holds no duplicates and keeps insertion order
    - last_topic is always the most recently matched topic
    """
    session_id: str
    messages: List[Message] = field(default_factory=list)
    message_count: int = 0
    user_turns: int = 0

    # Language
    language: str = "auto"
    language_info: LanguageInfo = field(default_factory=LanguageInfo)

    # Topics
    topics: List[str] = field(default_factory=list)
    last_topic: Optional[str] = None
    primary_intent: Optional[str] = None
    active_topic_chain: List[str] = field(default_factory=list)
    reference_memory: List[str] = field(default_factory=list)
    contextual_reference: Optional[ContextualReference] = None

    # Structured sub-contexts
    booking_context: BookingContext = field(default_factory=BookingContext)
    late_arrival_context: LateArrivalContext = field(default_factory=LateArrivalContext)
    time_context: TimeContext = field(default_factory=TimeContext)

    # Metadata
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def last_user_message(self) -> Optional[str]:
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return None

    def history(self, limit: Optional[int] = None) -> List[Dict[str, str]]:
        """Role/content pairs, oldest first."""
        selected = self.messages if limit is None else self.messages[-limit:]
        return [{"role": m.role, "content": m.content} for m in selected]

    def to_summary(self) -> Dict[str, Any]:
        """Diagnostic view of the session."""
        return {
            "session_id": self.session_id,
            "language": self.language,
            "language_locked": self.language_info.is_locked,
            "language_confidence": self.language_info.confidence.value,
            "topics": list(self.topics),
            "last_topic": self.last_topic,
            "primary_intent": self.primary_intent,
            "active_topic_chain": list(self.active_topic_chain),
            "message_count": self.message_count,
            "history_length": len(self.messages),
            "booking": {
                "has_intent": self.booking_context.has_intent,
                "dates": [d.text for d in self.booking_context.dates],
                "preferred_date": (
                    self.booking_context.preferred_date.text
                    if self.booking_context.preferred_date else None
                ),
                "has_change_intent": self.booking_context.has_change_intent,
                "change_confidence": self.booking_context.change_confidence,
            },
            "is_late": self.late_arrival_context.is_late,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
