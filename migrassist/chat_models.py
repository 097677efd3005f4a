"""Streaming chat model clients.

Both clients expose ``stream(messages)`` which returns a lazy, forward-only
iterator over answer fragments in the order the model produces them.
"""

import json
from collections.abc import Iterator, Sequence

import httpx
from openai import AzureOpenAI

from .config import CHAT_TEMPERATURE, config
from .models import PromptMessage

logger = config.get_logger(__name__)


class AzureOpenAIChatModel:
    """Chat completions from an Azure OpenAI deployment."""

    def __init__(
        self,
        api_key: str | None = None,
        deployment: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        """Initialize the Azure OpenAI chat client.

        Args:
            api_key: Azure OpenAI API key. If None,
                reads from AZURE_OPENAI_API_KEY environment variable.
            deployment: Chat deployment name. If None, uses
                config.AZURE_OPENAI_CHAT_DEPLOYMENT.
            endpoint: Azure OpenAI endpoint. If None, uses
                config.AZURE_OPENAI_API_ENDPOINT.
        """
        default_headers = config.get_api_headers()
        self.client = AzureOpenAI(
            api_key=api_key or config.get_azure_openai_api_key(),
            azure_endpoint=endpoint or config.AZURE_OPENAI_API_ENDPOINT,
            api_version=config.AZURE_OPENAI_API_VERSION,
            default_headers=default_headers or None,
        )
        self.model = deployment or config.AZURE_OPENAI_CHAT_DEPLOYMENT
        self.temperature = CHAT_TEMPERATURE

    def stream(self, messages: Sequence[PromptMessage]) -> Iterator[str]:
        """Yield answer fragments as the deployment generates them."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=list(messages),
            temperature=self.temperature,
            stream=True,
        )
        try:
            for chunk in response:
                # Azure sends a prompt-filter chunk with no choices first
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        finally:
            response.close()

    def close(self) -> None:
        self.client.close()


class OllamaChatModel:
    """Chat completions from a local Ollama server."""

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.model = model or config.OLLAMA_CHAT_MODEL
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.temperature = CHAT_TEMPERATURE
        self.client = client or httpx.Client(
            timeout=config.OLLAMA_TIMEOUT,
            headers=config.get_api_headers(),
        )

    def stream(self, messages: Sequence[PromptMessage]) -> Iterator[str]:
        """Yield answer fragments from Ollama's ndjson chat stream.

        Raises:
            RuntimeError: If Ollama reports an error inside the stream.
        """
        payload = {
            "model": self.model,
            "messages": list(messages),
            "stream": True,
            "options": {"temperature": self.temperature},
        }
        with self.client.stream(
            "POST", f"{self.base_url}/api/chat", json=payload
        ) as response:
            response.raise_for_status()
            for line in response.iter_lines():
                if not line:
                    continue
                data = json.loads(line)
                if "error" in data:
                    msg = f"Ollama chat error: {data['error']}"
                    raise RuntimeError(msg)
                content = data.get("message", {}).get("content", "")
                if content:
                    yield content
                if data.get("done"):
                    break

    def close(self) -> None:
        self.client.close()
