"""Tests for the streaming chat model clients."""

import json
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
from conftest import TestConstants

from migrassist import AzureOpenAIChatModel, OllamaChatModel
from migrassist.config import CHAT_TEMPERATURE

MESSAGES = [
    {"role": "system", "content": "Answer from sources."},
    {"role": "user", "content": TestConstants.QUESTION},
]


class FakeCompletionStream:
    """Stands in for the openai ``Stream`` of chat completion chunks."""

    def __init__(self, contents):
        self.chunks = [self._chunk(content) for content in contents]
        self.closed = False

    @staticmethod
    def _chunk(content):
        if content is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])

    def __iter__(self):
        return iter(self.chunks)

    def close(self):
        self.closed = True


@pytest.fixture
def azure_chat_model():
    return AzureOpenAIChatModel(
        api_key=TestConstants.TEST_API_KEY,
        deployment="chat",
        endpoint=TestConstants.TEST_AZURE_ENDPOINT,
    )


def test_azure_stream_yields_content_in_order(azure_chat_model):
    stream = FakeCompletionStream([None, "", "Move", " to", " Berlin", None])

    with patch.object(
        azure_chat_model.client.chat.completions, "create", return_value=stream
    ) as mock_create:
        fragments = list(azure_chat_model.stream(MESSAGES))

    assert fragments == ["Move", " to", " Berlin"]
    assert stream.closed
    mock_create.assert_called_once_with(
        model="chat",
        messages=MESSAGES,
        temperature=CHAT_TEMPERATURE,
        stream=True,
    )


def test_azure_stream_closed_when_consumer_stops(azure_chat_model):
    stream = FakeCompletionStream(["a", "b", "c"])

    with patch.object(
        azure_chat_model.client.chat.completions, "create", return_value=stream
    ):
        fragments = azure_chat_model.stream(MESSAGES)
        assert next(fragments) == "a"
        fragments.close()

    assert stream.closed


def test_azure_stream_is_lazy(azure_chat_model):
    with patch.object(azure_chat_model.client.chat.completions, "create") as mock_create:
        azure_chat_model.stream(MESSAGES)

    mock_create.assert_not_called()


def _ndjson(*objects):
    return "".join(json.dumps(obj) + "\n" for obj in objects).encode()


def test_ollama_stream_reads_ndjson():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            content=_ndjson(
                {"message": {"role": "assistant", "content": "Bon"}, "done": False},
                {"message": {"role": "assistant", "content": "jour"}, "done": False},
                {"message": {"role": "assistant", "content": ""}, "done": True},
                {"message": {"role": "assistant", "content": "ignored"}, "done": False},
            ),
        )

    model = OllamaChatModel(
        model="llama3.1",
        base_url="http://ollama:11434",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    assert list(model.stream(MESSAGES)) == ["Bon", "jour"]
    assert str(requests[0].url) == "http://ollama:11434/api/chat"
    assert json.loads(requests[0].content) == {
        "model": "llama3.1",
        "messages": MESSAGES,
        "stream": True,
        "options": {"temperature": CHAT_TEMPERATURE},
    }


def test_ollama_stream_error_line():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=_ndjson(
                {"message": {"content": "Hi"}, "done": False},
                {"error": "model crashed"},
            ),
        )

    model = OllamaChatModel(
        base_url="http://ollama",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    fragments = model.stream(MESSAGES)

    assert next(fragments) == "Hi"
    with pytest.raises(RuntimeError, match="model crashed"):
        next(fragments)


def test_ollama_stream_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "model not found"})

    model = OllamaChatModel(
        base_url="http://ollama",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        list(model.stream(MESSAGES))
