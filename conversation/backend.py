"""
Context backend protocol for the Lagoon Concierge engine.

Abstracts where session contexts live so the store can work with the
in-process map or an external TTL-capable key-value store.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Iterator, Optional, Protocol, Tuple, runtime_checkable

from .models import SessionContext

logger = logging.getLogger(__name__)


@runtime_checkable
class ContextBackend(Protocol):
    """Protocol for session context storage."""

    def get(self, session_id: str) -> Optional[SessionContext]:
        """Return the live context, or None if absent or expired."""
        ...

    def put(self, session_id: str, context: SessionContext) -> None:
        """Store a context and restart its inactivity window."""
        ...

    def expire(self, session_id: str) -> bool:
        """Drop a context immediately. Returns True if one was removed."""
        ...

    def items(self) -> Iterator[Tuple[str, SessionContext]]:
        """Iterate over live contexts."""
        ...


class InMemoryContextBackend:
    """
    Volatile context storage with inactivity expiry.

    Each entry carries a deadline checked lazily on access. When an event
    loop is running, a cancellable timer also evicts the entry at its
    deadline so idle sessions do not accumulate under churn.
    """

    def __init__(self, ttl_seconds: float = 24 * 60 * 60, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, SessionContext] = {}
        self._deadlines: Dict[str, float] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def get(self, session_id: str) -> Optional[SessionContext]:
        if session_id not in self._entries:
            return None
        if self._clock() >= self._deadlines[session_id]:
            logger.info(f"Session {session_id} expired after inactivity")
            self.expire(session_id)
            return None
        return self._entries[session_id]

    def put(self, session_id: str, context: SessionContext) -> None:
        self._entries[session_id] = context
        self._deadlines[session_id] = self._clock() + self.ttl_seconds
        self._schedule(session_id)

    def expire(self, session_id: str) -> bool:
        timer = self._timers.pop(session_id, None)
        if timer is not None:
            timer.cancel()
        self._deadlines.pop(session_id, None)
        return self._entries.pop(session_id, None) is not None

    def items(self) -> Iterator[Tuple[str, SessionContext]]:
        for session_id in list(self._entries):
            context = self.get(session_id)
            if context is not None:
                yield session_id, context

    def __len__(self) -> int:
        return len(self._entries)

    def _schedule(self, session_id: str):
        """(Re)arm the expiry timer when running inside an event loop."""
        previous = self._timers.pop(session_id, None)
        if previous is not None:
            previous.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: lazy expiry on access covers it
            return

        self._timers[session_id] = loop.call_later(self.ttl_seconds, self._on_timer, session_id)

    def _on_timer(self, session_id: str):
        self._timers.pop(session_id, None)
        if session_id in self._entries:
            logger.info(f"Cleaning up inactive session {session_id}")
            self._deadlines.pop(session_id, None)
            self._entries.pop(session_id, None)
