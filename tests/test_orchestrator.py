"""Tests for turn orchestration."""

import asyncio

import pytest

from conftest import FakeVectorSearch
from config.settings import Settings
from conversation.booking_change import BookingChangeTracker, KeywordBookingChangeDetector
from llm.instructions import InstructionSet
from llm.orchestrator import ChatOrchestrator, ChatRequest
from llm.prompt_optimizer import PromptOptimizer
from llm.services import Services
from retrieval.knowledge_retriever import KnowledgeRetriever
from retrieval.rule_matcher import RuleMatcher


class RecordingGenerator:
    def __init__(self, reply="Happy to help.", fail=False):
        self.reply = reply
        self.fail = fail
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("model unavailable")
        return self.reply


class ExplodingDetector:
    async def detect(self, message, context):
        raise RuntimeError("classifier down")


@pytest.fixture
def make_orchestrator(store, content_store):
    def _make(generator=None, booking_detector=None, vector_search=None, instructions=None):
        return ChatOrchestrator(
            store=store,
            retriever=KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector_search),
            optimizer=PromptOptimizer(),
            booking_detector=booking_detector,
            booking_tracker=BookingChangeTracker(tracker=store.tracker),
            generator=generator,
            instructions=instructions,
        )
    return _make


class TestChatOrchestrator:
    def test_english_turn(self, make_orchestrator):
        async def scenario():
            generator = RecordingGenerator()
            orchestrator = make_orchestrator(generator=generator)

            result = await orchestrator.process(ChatRequest(session_id="s1", message="How much does the Saman package cost?"))

            assert result.language == "en"
            assert result.payload.endswith("RESPOND IN ENGLISH.")
            assert [f.type for f in result.fragments] == ["packages"]
            assert result.knowledge.fragment_count == 1
            assert result.response == "Happy to help."
            assert "pricing" in result.new_topics
            assert "<knowledge>" in generator.requests[0].user_prompt
            assert generator.requests[0].history == []

            context = orchestrator.get_context("s1")
            assert [m.role for m in context.messages] == ["user", "assistant"]

        asyncio.run(scenario())

    def test_language_switches_to_icelandic(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator()
            await orchestrator.process(ChatRequest(session_id="s1", message="What are your opening hours today?"))
            result = await orchestrator.process(ChatRequest(session_id="s1", message="Hvað kostar Saman?"))

            assert result.language == "is"
            assert result.payload.endswith("RESPOND IN ICELANDIC.")
            assert result.fragments[0].metadata["locale"] == "is"

        asyncio.run(scenario())

    def test_first_turn_icelandic_pricing(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator()
            result = await orchestrator.process(ChatRequest(session_id="s1", message="Hvað kostar?"))

            assert result.language == "is"
            assert result.language_decision.is_high_confidence
            assert "packages" in [f.type for f in result.fragments]

        asyncio.run(scenario())

    def test_history_passed_to_generator(self, make_orchestrator):
        async def scenario():
            generator = RecordingGenerator()
            orchestrator = make_orchestrator(generator=generator)
            await orchestrator.process(ChatRequest(session_id="s1", message="Tell me about the ritual"))
            await orchestrator.process(ChatRequest(session_id="s1", message="what about the steps?"))

            history = generator.requests[1].history
            assert history == [
                {"role": "user", "content": "Tell me about the ritual"},
                {"role": "assistant", "content": "Happy to help."},
            ]

        asyncio.run(scenario())

    def test_follow_up_rewritten_for_vector_search(self, make_orchestrator):
        async def scenario():
            vector = FakeVectorSearch()
            orchestrator = make_orchestrator(vector_search=vector)
            await orchestrator.process(ChatRequest(session_id="s1", message="Tell me about the ritual"))
            result = await orchestrator.process(ChatRequest(session_id="s1", message="what about the steps?"))

            assert result.metadata["topic_chain"] == ["ritual", "steps"]
            assert vector.queries[-1]["query"].startswith("ritual")

        asyncio.run(scenario())

    def test_booking_change_form(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(booking_detector=KeywordBookingChangeDetector())
            result = await orchestrator.process(ChatRequest(session_id="s1", message="Can I change my booking to Friday?"))

            assert result.booking.should_show
            assert "booking_change" in orchestrator.get_context("s1").topics

            result = await orchestrator.process(
                ChatRequest(session_id="s1", message="What's the difference between Saman and Sér?")
            )
            assert not result.booking.should_show
            assert not orchestrator.get_context("s1").booking_context.has_change_intent

        asyncio.run(scenario())

    def test_detector_failure_does_not_fail_turn(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(booking_detector=ExplodingDetector())
            result = await orchestrator.process(ChatRequest(session_id="s1", message="Change my booking"))
            assert result.booking is None
            assert result.fragments

        asyncio.run(scenario())

    def test_generator_failure_propagates(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(generator=RecordingGenerator(fail=True))
            with pytest.raises(RuntimeError):
                await orchestrator.process(ChatRequest(session_id="s1", message="Hello"))

        asyncio.run(scenario())

    def test_unsectioned_instructions_used_verbatim(self, make_orchestrator):
        async def scenario():
            text = "You are a helpful assistant for a spa."
            orchestrator = make_orchestrator(instructions=InstructionSet.from_text(text))
            result = await orchestrator.process(ChatRequest(session_id="s1", message="When do you open?"))
            assert result.payload == text

        asyncio.run(scenario())

    def test_vector_backend_failure_does_not_fail_turn(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(vector_search=FakeVectorSearch(fail=True))
            result = await orchestrator.process(ChatRequest(session_id="s1", message="ritual?"))
            assert [f.type for f in result.fragments] == ["ritual"]

        asyncio.run(scenario())

    def test_concurrent_turns_are_serialized(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(generator=RecordingGenerator())
            await asyncio.gather(*[
                orchestrator.process(ChatRequest(session_id="s1", message=f"question {i}"))
                for i in range(5)
            ])

            context = orchestrator.get_context("s1")
            assert context.message_count == 10
            roles = [m.role for m in context.messages]
            assert roles == ["user", "assistant"] * 5

        asyncio.run(scenario())

    def test_end_session(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator()
            await orchestrator.process(ChatRequest(session_id="s1", message="Hello"))
            assert orchestrator.end_session("s1")
            assert orchestrator.get_context("s1") is None

        asyncio.run(scenario())

    def test_turn_result_serializes(self, make_orchestrator):
        async def scenario():
            orchestrator = make_orchestrator(booking_detector=KeywordBookingChangeDetector())
            result = await orchestrator.process(ChatRequest(session_id="s1", message="Is the bus running?"))
            data = result.to_dict()
            assert data["session_id"] == "s1"
            assert data["booking"]["should_show"] is False
            assert data["processing_time_ms"] >= 0

        asyncio.run(scenario())


class TestServices:
    def test_initialize_without_vector_index(self):
        async def scenario():
            services = Services(settings=Settings(pinecone_api_key=""), generator=RecordingGenerator())
            services.initialize()

            assert services.is_ready
            assert services.vector_search is None
            result = await services.orchestrator.process(ChatRequest(session_id="s1", message="When do you open?"))
            assert result.fragments[0].type == "opening_hours"
            assert services.health()["sessions"] == 1

        asyncio.run(scenario())
