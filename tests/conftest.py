"""Shared fixtures for Lagoon Concierge tests."""

import asyncio
import os
from typing import List

import pytest

# Ensure we use test/mock settings
os.environ.setdefault("EMBEDDING_PROVIDER", "bedrock")
os.environ.setdefault("PINECONE_API_KEY", "")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from conversation.backend import InMemoryContextBackend
from conversation.models import SessionContext
from conversation.session_store import SessionContextStore
from retrieval.content_store import StaticContentStore
from retrieval.pinecone_client import SearchResult


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeEmbedder:
    dimension = 4

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.calls: List[str] = []

    async def embed_text(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("embedding backend unreachable")
        return [0.1, 0.2, 0.3, 0.4]

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        return [await self.embed_text(t) for t in texts]


class FakeIndex:
    """Stands in for PineconeClient."""

    def __init__(self, matches=None):
        self.matches = matches or []
        self.queries = []
        self.upserts = []
        self.cleared = []

    def query(self, embedding, top_k=5, namespace="en", min_score=0.0):
        self.queries.append({"top_k": top_k, "namespace": namespace, "min_score": min_score})
        return [m for m in self.matches if m.score >= min_score][:top_k]

    def upsert(self, vectors, namespace):
        self.upserts.append((namespace, vectors))
        return len(vectors)

    def clear_namespace(self, namespace):
        self.cleared.append(namespace)


class FakeVectorSearch:
    def __init__(self, results=None, fail=False):
        self.results = results or []
        self.fail = fail
        self.queries = []

    async def search(self, query, top_k=5, min_similarity=0.5, language="en"):
        self.queries.append({"query": query, "language": language})
        if self.fail:
            raise ConnectionError("backend down")
        return list(self.results)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionContextStore(backend=InMemoryContextBackend(ttl_seconds=60, clock=clock))


@pytest.fixture
def context():
    return SessionContext(session_id="test-session")


@pytest.fixture
def content_store():
    return StaticContentStore.from_default()


@pytest.fixture
def sample_matches():
    return [
        SearchResult(id="en:ritual.steps", score=0.62, text="Step three is the cold plunge.",
                     metadata={"type": "ritual", "section": "ritual.steps"}),
        SearchResult(id="en:ritual.duration", score=0.91, text="The ritual takes about 45 minutes.",
                     metadata={"type": "ritual", "section": "ritual.duration"}),
        SearchResult(id="en:dining.bar", score=0.31, text="The Gelmir bar is in the lagoon.",
                     metadata={"type": "dining", "section": "dining.bar"}),
    ]
