"""Tests for retrieval components."""

import asyncio

from conftest import FakeEmbedder, FakeIndex, FakeVectorSearch
from retrieval.context_builder import ContextBuilder
from retrieval.fragments import KnowledgeFragment, render_content
from retrieval.knowledge_retriever import KnowledgeRetriever
from retrieval.pinecone_client import PineconeClient
from retrieval.query_rewriter import QueryRewriter
from retrieval.rule_matcher import RuleMatcher
from retrieval.token_estimator import TokenEstimator
from retrieval.vector_search import SearchResultCache, VectorSearchService


# ── Content Store ─────────────────────────────────────

class TestContentStore:
    def test_dotted_reference(self, content_store):
        assert content_store.get("policies.late_arrival.grace_period", "en") == "30 minutes"

    def test_unknown_locale_uses_default(self, content_store):
        assert content_store.get("packages", "de") == content_store.get("packages", "en")

    def test_missing_reference(self, content_store):
        assert content_store.get("packages.platinum", "en") is None

    def test_documents_include_fallback_sections(self, content_store):
        refs = [ref for ref, _ in content_store.documents("is")]
        assert "policies.late_arrival" in refs
        assert "group_bookings" in refs
        assert len(refs) == len(set(refs))


# ── Query Rewriter ────────────────────────────────────

class TestQueryRewriter:
    def test_follow_up_uses_topic_chain(self, context):
        context.last_topic = "ritual"
        context.active_topic_chain = ["ritual", "steps"]
        query = QueryRewriter().rewrite("what about the steps?", context)
        assert query.startswith("ritual")
        assert "steps" in query
        assert "what about" not in query

    def test_follow_up_uses_last_topic(self, context):
        context.last_topic = "transportation"
        assert QueryRewriter().rewrite("and from the airport?", context) == "transportation and from the airport"

    def test_bare_date_with_booking_history(self, context):
        context.booking_context.has_intent = True
        assert QueryRewriter().rewrite("on March 15", context) == "change booking date to March 15 availability"

    def test_bare_date_in_icelandic(self, context):
        context.language = "is"
        context.topics.append("booking")
        assert QueryRewriter().rewrite("15. mars", context) == "breyta bókun dagsetning 15. mars"

    def test_bare_date_without_history_is_just_cleaned(self, context):
        assert QueryRewriter().rewrite("March 15!", context) == "march 15"

    def test_needs_vector_search(self):
        rewriter = QueryRewriter(short_query_max_tokens=3)
        fragment = KnowledgeFragment(type="packages", content="x")
        assert rewriter.needs_vector_search("anything at all here", [])
        assert rewriter.needs_vector_search("and parking?", [fragment])
        assert rewriter.needs_vector_search("What about the Sér package then", [fragment])
        assert not rewriter.needs_vector_search("How much does the Saman package cost", [fragment])


# ── Vector Search ─────────────────────────────────────

class TestVectorSearchService:
    def test_results_sorted_and_filtered(self, sample_matches):
        async def scenario():
            service = VectorSearchService(FakeEmbedder(), FakeIndex(sample_matches))
            results = await service.search("ritual steps", top_k=5, min_similarity=0.5)
            assert [r["similarity"] for r in results] == [0.91, 0.62]
            assert results[0]["metadata"]["id"] == "en:ritual.duration"

        asyncio.run(scenario())

    def test_failure_degrades_to_empty(self):
        async def scenario():
            service = VectorSearchService(FakeEmbedder(fail=True), FakeIndex())
            assert await service.search("ritual") == []
            assert len(service.cache) == 0

        asyncio.run(scenario())

    def test_timeout_degrades_to_empty(self, sample_matches):
        async def scenario():
            service = VectorSearchService(FakeEmbedder(delay=0.5), FakeIndex(sample_matches), timeout_seconds=0.01)
            assert await service.search("ritual") == []

        asyncio.run(scenario())

    def test_cache_hit_skips_index(self, sample_matches):
        async def scenario():
            index = FakeIndex(sample_matches)
            service = VectorSearchService(FakeEmbedder(), index)
            await service.search("Ritual steps")
            await service.search("ritual steps ")
            assert len(index.queries) == 1

        asyncio.run(scenario())

    def test_language_selects_namespace(self, sample_matches):
        async def scenario():
            index = FakeIndex(sample_matches)
            service = VectorSearchService(FakeEmbedder(), index)
            await service.search("ritual", language="is")
            await service.search("ritual", language="auto")
            assert [q["namespace"] for q in index.queries] == ["is", "en"]

        asyncio.run(scenario())

    def test_cache_expiry(self, clock):
        cache = SearchResultCache(ttl_seconds=10, maxsize=2, clock=clock)
        cache.put(("a", 5, 0.5, "en"), [])
        clock.advance(11)
        assert cache.get(("a", 5, 0.5, "en")) is None

    def test_namespace_for(self):
        assert PineconeClient.namespace_for("is") == "is"
        assert PineconeClient.namespace_for("auto") == "en"
        assert PineconeClient.namespace_for(None) == "en"


# ── Knowledge Retriever ───────────────────────────────

class TestKnowledgeRetriever:
    def test_rules_first_then_vector_by_similarity(self, content_store, context):
        async def scenario():
            context.last_topic = "ritual"
            context.active_topic_chain = ["ritual", "steps"]
            vector = FakeVectorSearch([
                {"content": "Steam room comes sixth.", "metadata": {"type": "ritual"}, "similarity": 0.6},
                {"content": "Mist cools you down.", "metadata": {"type": "ritual"}, "similarity": 0.8},
            ])
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)

            fragments = await retriever.retrieve("what about the steps?", context)

            assert fragments[0].metadata["rule"] == "ritual"
            assert [f.similarity for f in fragments[1:]] == [0.8, 0.6]
            assert vector.queries[0]["query"].startswith("ritual")

        asyncio.run(scenario())

    def test_vector_duplicate_of_rule_content_dropped(self, content_store, context):
        async def scenario():
            duplicate = "Most guests spend 45 minutes to an hour on the ritual."
            vector = FakeVectorSearch([{"content": duplicate, "metadata": {}, "similarity": 0.9}])
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)

            fragments = await retriever.retrieve("ritual?", context)
            assert len(fragments) == 1
            assert fragments[0].similarity is None

        asyncio.run(scenario())

    def test_long_rule_hit_skips_vector(self, content_store, context):
        async def scenario():
            vector = FakeVectorSearch()
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)
            await retriever.retrieve("How much does the Saman package cost", context)
            assert vector.queries == []

        asyncio.run(scenario())

    def test_failing_vector_search_keeps_rule_results(self, content_store, context):
        async def scenario():
            vector = VectorSearchService(FakeEmbedder(fail=True), FakeIndex())
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)
            fragments = await retriever.retrieve("ritual?", context)
            assert [f.type for f in fragments] == ["ritual"]

        asyncio.run(scenario())

    def test_raising_vector_backend_keeps_rule_results(self, content_store, context):
        async def scenario():
            vector = FakeVectorSearch(fail=True)
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)
            fragments = await retriever.retrieve("ritual?", context)
            assert len(vector.queries) == 1
            assert [f.type for f in fragments] == ["ritual"]

        asyncio.run(scenario())

    def test_nested_vector_content_is_rendered(self, content_store, context):
        async def scenario():
            vector = FakeVectorSearch([
                {"content": {"towels": "Included", "lockers": ["Private", "Shared"]}, "metadata": {}, "similarity": 0.7},
                {"content": None, "metadata": {}, "similarity": 0.9},
            ])
            retriever = KnowledgeRetriever(RuleMatcher(content_store), vector_search=vector)

            fragments = await retriever.retrieve("hmm", context)

            assert len(fragments) == 1
            assert fragments[0].content == {"towels": "Included", "lockers": ["Private", "Shared"]}
            assert "towels: Included" in fragments[0].text

        asyncio.run(scenario())


# ── Context Builder ───────────────────────────────────

class TestContextBuilder:
    def test_build_with_fragments(self):
        builder = ContextBuilder(max_tokens=500)
        fragments = [
            KnowledgeFragment(type="packages", content={"saman": "12,990 ISK"}),
            KnowledgeFragment(type="ritual", subtype="steps", content="Seven steps.", similarity=0.82),
        ]
        block = builder.build(fragments)
        assert block.fragment_count == 2
        assert "[packages]" in block.text
        assert "[ritual/steps (similarity 0.82)]" in block.text
        assert not block.truncated
        assert builder.format_for_prompt(block).startswith("<knowledge>")

    def test_empty_fragments(self):
        block = ContextBuilder().build([])
        assert block.text == ""
        assert block.fragment_count == 0
        assert ContextBuilder().format_for_prompt(block) == ""

    def test_truncates_at_budget(self):
        builder = ContextBuilder(max_tokens=150)
        fragments = [
            KnowledgeFragment(type="a", content="x " * 400),
            KnowledgeFragment(type="b", content="y " * 400),
        ]
        block = builder.build(fragments)
        assert block.truncated
        assert block.fragment_count == 1
        assert block.text.endswith("...")


# ── Token Estimator & rendering ───────────────────────

class TestTokenEstimator:
    def test_heuristic(self):
        estimator = TokenEstimator(provider="bedrock")
        assert estimator.estimate("") == 0
        assert estimator.estimate("abcdefgh") == 2
        assert estimator.estimate("ðððð") == 2

    def test_render_content(self):
        text = render_content({"opening_hours": {"summer": "09:00 - 23:00"}})
        assert text == "opening hours:\n  summer: 09:00 - 23:00"
