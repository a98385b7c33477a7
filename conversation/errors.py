"""
Error types for the Lagoon Concierge engine.

Every error here is raised where the condition is detected and recovered
by the component that owns it; none of them reach the caller of a turn.
"""


class AssistantError(Exception):
    """Base class for recoverable engine errors."""


class RetrievalUnavailable(AssistantError):
    """Vector search backend failed or timed out."""


class ConfigurationDrift(AssistantError):
    """Expected instruction sections or markers are missing."""


class MalformedDate(AssistantError):
    """A date-like token could not be parsed into a calendar date."""

    def __init__(self, raw: str):
        super().__init__(f"Unparseable date mention: '{raw}'")
        self.raw = raw


class SessionExpired(AssistantError):
    """No live context exists for a session id."""

    def __init__(self, session_id: str):
        super().__init__(f"No active context for session {session_id}")
        self.session_id = session_id
