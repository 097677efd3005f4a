"""Tests for the Azure OpenAI and Ollama embedders."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import numpy as np
import pytest
from conftest import TestConstants

from migrassist import AzureOpenAIEmbedder, OllamaEmbedder


def _embedding_response(vectors):
    return SimpleNamespace(data=[SimpleNamespace(embedding=v) for v in vectors])


@pytest.fixture
def azure_embedder():
    return AzureOpenAIEmbedder(
        api_key=TestConstants.TEST_API_KEY,
        deployment="embeddings",
        endpoint=TestConstants.TEST_AZURE_ENDPOINT,
    )


def test_azure_embed_query(azure_embedder):
    with patch.object(
        azure_embedder.client.embeddings,
        "create",
        return_value=_embedding_response([[0.1, 0.2, 0.3]]),
    ) as mock_create:
        embedding = azure_embedder.embed_query("Visa rules")

    mock_create.assert_called_once_with(model="embeddings", input="Visa rules")
    assert isinstance(embedding, np.ndarray)
    np.testing.assert_allclose(embedding, [0.1, 0.2, 0.3])


def test_azure_embed_documents_in_batches(azure_embedder):
    texts = [f"text {i}" for i in range(5)]

    def fake_create(model, input):  # noqa: A002
        return _embedding_response([[float(len(t))] for t in input])

    with patch.object(
        azure_embedder.client.embeddings, "create", side_effect=fake_create
    ) as mock_create:
        embeddings = azure_embedder.embed_documents(texts, batch_size=2)

    assert mock_create.call_count == 3
    assert len(embeddings) == 5


def test_azure_embed_errors_propagate(azure_embedder, caplog):
    with (
        patch.object(
            azure_embedder.client.embeddings,
            "create",
            side_effect=RuntimeError("quota exceeded"),
        ),
        pytest.raises(RuntimeError, match="quota exceeded"),
    ):
        azure_embedder.embed_query("anything")

    assert "Error generating embedding" in caplog.text


def _ollama_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_ollama_embed_documents():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        return httpx.Response(
            200, json={"embeddings": [[1.0, 0.0] for _ in body["input"]]}
        )

    embedder = OllamaEmbedder(
        model="nomic-embed-text",
        base_url="http://ollama:11434/",
        client=_ollama_client(handler),
    )

    embeddings = embedder.embed_documents(["a", "b"])

    assert len(embeddings) == 2
    assert str(requests[0].url) == "http://ollama:11434/api/embed"
    assert json.loads(requests[0].content) == {
        "model": "nomic-embed-text",
        "input": ["a", "b"],
    }


def test_ollama_embed_query_returns_single_vector():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"embeddings": [[0.5, 0.5, 0.5]]})

    embedder = OllamaEmbedder(base_url="http://ollama", client=_ollama_client(handler))

    np.testing.assert_allclose(embedder.embed_query("q"), [0.5, 0.5, 0.5])


def test_ollama_embed_documents_empty_skips_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    embedder = OllamaEmbedder(base_url="http://ollama", client=_ollama_client(handler))

    assert embedder.embed_documents([]) == []


def test_ollama_embed_count_mismatch():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"embeddings": [[1.0]]})

    embedder = OllamaEmbedder(base_url="http://ollama", client=_ollama_client(handler))

    with pytest.raises(RuntimeError, match="Unexpected embeddings response"):
        embedder.embed_documents(["a", "b"])


def test_ollama_http_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="model not loaded")

    embedder = OllamaEmbedder(base_url="http://ollama", client=_ollama_client(handler))

    with pytest.raises(httpx.HTTPStatusError):
        embedder.embed_query("q")


def test_ollama_close_closes_http_client():
    client = _ollama_client(lambda request: httpx.Response(200, json={}))
    embedder = OllamaEmbedder(base_url="http://ollama", client=client)

    embedder.close()

    assert client.is_closed
