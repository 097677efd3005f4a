"""Test configuration and fixtures for the chat API tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Fake collaborators (embedder, chat model, vector store)
- Backend and factory fixtures
- HTTP client fixtures
- Vector store fixtures
"""

import hashlib
from collections.abc import Iterator, Sequence
from unittest.mock import Mock

import numpy as np
import pytest
from fastapi.testclient import TestClient

from migrassist import Backend, BackendFactory, ChatHandler, DocumentChunk, FaissVectorStore
from migrassist.api import create_app
from migrassist.models import RetrievedDocument


class TestConstants:
    """Centralized test constants shared across the test suite."""

    TEST_API_KEY = "test-key"
    TEST_AZURE_ENDPOINT = "https://example.openai.azure.com/"
    DEFAULT_EMBEDDING_DIMENSION = 64
    QUESTION = "Where should I move?"


class FakeEmbedder:
    """Deterministic embeddings derived from a hash of the text."""

    def __init__(self, dimension: int = TestConstants.DEFAULT_EMBEDDING_DIMENSION) -> None:
        self.dimension = dimension
        self.queries: list[str] = []

    def embed_query(self, text: str) -> np.ndarray:
        self.queries.append(text)
        return self._vector(text)

    def embed_documents(self, texts: list[str]) -> list[np.ndarray]:
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> np.ndarray:
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return (embedding / np.linalg.norm(embedding)).astype(np.float32)


class FakeChatModel:
    """Yields canned fragments, or echoes the user message when none are given."""

    def __init__(
        self,
        fragments: Sequence[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.fragments = fragments
        self.error = error
        self.calls: list[list[dict[str, str]]] = []
        self.closed = False

    def stream(self, messages: Sequence[dict[str, str]]) -> Iterator[str]:
        self.calls.append(list(messages))
        try:
            if self.fragments is None:
                question = messages[-1]["content"]
                yield from question.split(" ")[:1]
                yield from (f" {word}" for word in question.split(" ")[1:])
            else:
                yield from self.fragments
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


class FakeVectorStore:
    """Returns fixed documents and records every search."""

    def __init__(
        self,
        documents: list[RetrievedDocument] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.documents = documents or []
        self.error = error
        self.searches: list[tuple[str, int]] = []
        self.added: list[DocumentChunk] = []
        self.saved = False

    def similarity_search(self, query: str, k: int) -> list[RetrievedDocument]:
        self.searches.append((query, k))
        if self.error is not None:
            raise self.error
        return self.documents[:k]

    def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        self.added.extend(chunks)

    def save(self) -> None:
        self.saved = True


@pytest.fixture
def sample_documents():
    return [
        RetrievedDocument(source_id="visa.txt", content="A work visa takes 3 months."),
        RetrievedDocument(source_id="jobs.pdf", content="Nurses are in demand."),
        RetrievedDocument(source_id="housing.txt", content="Rent is high in Paris."),
        RetrievedDocument(source_id="culture.txt", content="Greetings are formal."),
    ]


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def backend_factory(fake_embedder, sample_documents):
    """Build a local-kind ``Backend`` from fakes, overriding parts as needed."""

    def _create_backend(
        *,
        chat_model: FakeChatModel | None = None,
        vector_store: FakeVectorStore | None = None,
    ) -> Backend:
        return Backend(
            kind="local",
            embedder=fake_embedder,
            chat_model=chat_model or FakeChatModel(),
            vector_store=vector_store or FakeVectorStore(sample_documents),
        )

    return _create_backend


@pytest.fixture
def fake_backend(backend_factory):
    return backend_factory()


@pytest.fixture
def factory_mock(fake_backend):
    """A BackendFactory double that hands out ``fake_backend``."""
    factory = Mock(spec=BackendFactory)
    factory.create.return_value = fake_backend
    factory.kind = "local"
    return factory


@pytest.fixture
def api_client_factory():
    """Factory for TestClients wired to a given backend factory."""

    def _create_client(factory) -> TestClient:
        return TestClient(create_app(ChatHandler(factory)))

    return _create_client


@pytest.fixture
def api_client(api_client_factory, factory_mock):
    return api_client_factory(factory_mock)


@pytest.fixture
def temp_faiss_store(tmp_path, fake_embedder):
    """Empty FAISS store in a temporary directory."""
    return FaissVectorStore(tmp_path / "faiss", fake_embedder)


@pytest.fixture
def sample_embedded_chunks(fake_embedder):
    """Document chunks with embeddings, two source files."""
    texts = [
        "A work visa for Germany requires a job offer.",
        "France offers a talent passport for skilled workers.",
        "Rent in London is among the highest in Europe.",
        "The United States runs an annual diversity visa lottery.",
        "Learning the local language helps integration.",
    ]
    chunks = []
    for i, text in enumerate(texts):
        chunks.append(
            DocumentChunk(
                content=text,
                metadata={
                    "source": f"guide_{i // 3}.txt",
                    "chunk_id": i,
                    "start_char": i * 100,
                    "end_char": i * 100 + len(text),
                },
                embedding=fake_embedder.embed_documents([text])[0],
            )
        )
    return chunks
