"""
Chat Orchestrator for the Lagoon Concierge engine.

Runs one conversational turn: context update, language and topic
tracking, booking-change gating, knowledge retrieval and instruction
assembly, then the optional injected generation call.
"""

import asyncio
import logging
import time
import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from conversation.booking_change import (
    BookingChangeTracker,
    BookingFormDecision,
    BookingIntentDetector,
)
from conversation.models import LanguageDecision, SessionContext
from conversation.session_store import SessionContextStore
from retrieval.context_builder import ContextBuilder, KnowledgeBlock
from retrieval.fragments import KnowledgeFragment
from retrieval.knowledge_retriever import KnowledgeRetriever

from .instructions import InstructionSet
from .prompt_optimizer import PromptOptimizer
from .prompt_templates import PromptTemplates

logger = logging.getLogger(__name__)


@dataclass
class ChatRequest:
    """One user turn."""
    session_id: str
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GenerationRequest:
    """Everything the external generation call receives."""
    session_id: str
    system_prompt: str
    user_prompt: str
    message: str
    language: str
    history: List[Dict[str, str]] = field(default_factory=list)


Generator = Callable[[GenerationRequest], Awaitable[str]]


@dataclass
class TurnResult:
    """Outcome of one turn."""
    session_id: str
    message: str
    payload: str
    knowledge: KnowledgeBlock
    fragments: List[KnowledgeFragment]
    language: str
    language_decision: LanguageDecision
    new_topics: List[str] = field(default_factory=list)
    booking: Optional[BookingFormDecision] = None
    response: Optional[str] = None
    processing_time_ms: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "message": self.message,
            "payload": self.payload,
            "knowledge": self.knowledge.to_dict(),
            "fragments": [f.to_dict() for f in self.fragments],
            "language": self.language,
            "language_confidence": self.language_decision.confidence.value,
            "new_topics": self.new_topics,
            "booking": self.booking.to_dict() if self.booking else None,
            "response": self.response,
            "processing_time_ms": self.processing_time_ms,
            "timestamp": self.timestamp,
            "metadata": self.metadata,
        }


class ChatOrchestrator:
    """
    Orchestrates a turn.

    Pipeline:
    1. Get or create the session context
    2. Update language (sticky) and topics
    3. Append the user message (dates, late arrival)
    4. Merge and gate booking-change intent (when a detector is set)
    5. Retrieve knowledge (rules + vector)
    6. Optimize instructions and render the knowledge block
    7. Generate and record the response (when a generator is set)

    Turns for the same session are serialized.
    """

    def __init__(
        self,
        store: SessionContextStore,
        retriever: KnowledgeRetriever,
        optimizer: PromptOptimizer,
        context_builder: Optional[ContextBuilder] = None,
        instructions: Optional[InstructionSet] = None,
        booking_detector: Optional[BookingIntentDetector] = None,
        booking_tracker: Optional[BookingChangeTracker] = None,
        generator: Optional[Generator] = None,
        history_limit: int = 10,
        brand_name: str = "Sky Lagoon",
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Session context store
            retriever: Knowledge retriever
            optimizer: Prompt optimizer
            context_builder: Knowledge block renderer
            instructions: Complete instruction set (defaults for brand_name if omitted)
            booking_detector: Optional booking-change classifier
            booking_tracker: Merge/gate policy for booking-change signals
            generator: Optional async generation call
            history_limit: Messages passed to the generator
            brand_name: Brand used in the default instructions
        """
        self.store = store
        self.retriever = retriever
        self.optimizer = optimizer
        self.context_builder = context_builder if context_builder is not None else ContextBuilder()
        if instructions is None:
            instructions = PromptTemplates.default_instructions(brand_name)
        self.instructions = instructions
        self.booking_detector = booking_detector
        if booking_tracker is None:
            booking_tracker = BookingChangeTracker(tracker=store.tracker)
        self.booking_tracker = booking_tracker
        self.generator = generator
        self.history_limit = history_limit
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def process(self, request: ChatRequest) -> TurnResult:
        """
        Process one turn.

        Args:
            request: Session id and user message

        Returns:
            TurnResult

        Raises:
            Exception: Whatever the injected generator raises
        """
        start_time = time.time()
        lock = self._lock_for(request.session_id)

        async with lock:
            try:
                result = await self._run_turn(request)
            except Exception as e:
                logger.error(f"Turn failed for session {request.session_id}: {e}")
                raise

        result.processing_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            f"Turn done for session {request.session_id}: language={result.language}, "
            f"fragments={len(result.fragments)}, {result.processing_time_ms}ms"
        )
        return result

    async def _run_turn(self, request: ChatRequest) -> TurnResult:
        session_id = request.session_id
        message = request.message

        # Steps 1-3: context, language, topics, history
        self.store.get_or_create(session_id)
        decision = self.store.update_language(session_id, message)
        new_topics = self.store.update_topics(session_id, message)
        context = self.store.add_user_message(session_id, message)

        # Step 4: booking-change intent
        booking = await self._check_booking_change(context, message)

        # Step 5: knowledge
        fragments = await self.retriever.retrieve(message, context)

        # Step 6: instructions + knowledge block
        payload = self.optimizer.optimize(self.instructions, message, context)
        knowledge = self.context_builder.build(fragments)

        # Step 7: generation
        response = None
        if self.generator is not None:
            history = context.history(self.history_limit + 1)[:-1]
            generation = GenerationRequest(
                session_id=session_id,
                system_prompt=payload,
                user_prompt=PromptTemplates.build_user_prompt(
                    message, self.context_builder.format_for_prompt(knowledge)
                ),
                message=message,
                language=context.language,
                history=history,
            )
            response = await self.generator(generation)
            self.store.record_response(session_id, response)

        return TurnResult(
            session_id=session_id,
            message=message,
            payload=payload,
            knowledge=knowledge,
            fragments=fragments,
            language=context.language,
            language_decision=decision,
            new_topics=new_topics,
            booking=booking,
            response=response,
            metadata={
                "primary_intent": context.primary_intent,
                "last_topic": context.last_topic,
                "topics": list(context.topics),
                "topic_chain": list(context.active_topic_chain),
                "is_late": context.late_arrival_context.is_late,
                "prompt_cache": self.optimizer.cache.stats(),
                **request.metadata,
            },
        )

    async def _check_booking_change(
        self, context: SessionContext, message: str
    ) -> Optional[BookingFormDecision]:
        if self.booking_detector is None:
            return None

        try:
            signal = await self.booking_detector.detect(message, context)
        except Exception as e:
            logger.warning(f"Booking-change detection failed for session {context.session_id}: {e}")
            return None

        self.booking_tracker.merge(context, message, signal)
        decision = self.booking_tracker.decide(context, signal, message)
        if decision.should_show:
            logger.info(
                f"Booking-change form for session {context.session_id} "
                f"(confidence {decision.confidence:.2f}, agents available: {decision.is_within_agent_hours})"
            )
        return decision

    def get_context(self, session_id: str) -> Optional[SessionContext]:
        """The live context for a session, without creating one."""
        return self.store.backend.get(session_id)

    def end_session(self, session_id: str) -> bool:
        return self.store.expire(session_id)
