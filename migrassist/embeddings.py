"""Embedding clients for the cloud (Azure OpenAI) and local (Ollama) backends."""

import httpx
import numpy as np
from openai import AzureOpenAI

from .config import config

logger = config.get_logger(__name__)


class AzureOpenAIEmbedder:
    """Handles Azure OpenAI embeddings generation."""

    def __init__(
        self,
        api_key: str | None = None,
        deployment: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        """Initialize the embedder with Azure OpenAI credentials.

        Args:
            api_key: Azure OpenAI API key. If None,
                reads from AZURE_OPENAI_API_KEY environment variable.
            deployment: Embedding deployment name. If None, uses
                config.AZURE_OPENAI_EMBEDDING_DEPLOYMENT.
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
        self.model = deployment or config.AZURE_OPENAI_EMBEDDING_DEPLOYMENT

    def embed_query(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Returns:
            np.ndarray: The embedding vector for the input text.
        """
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
            embedding = np.array(response.data[0].embedding)
        except Exception:
            logger.exception("Error generating embedding")
            raise
        else:
            return embedding

    def embed_documents(
        self,
        texts: list[str],
        batch_size: int = 100,
    ) -> list[np.ndarray]:
        """Get embeddings for multiple texts in batches.

        Returns:
            list[np.ndarray]: One embedding vector per input text.
        """
        embeddings = []

        for i in range(0, len(texts), batch_size):
            batch_texts = texts[i : i + batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch_texts,
                )
            except Exception:
                logger.exception("Error generating batch embeddings")
                raise
            embeddings.extend(np.array(data.embedding) for data in response.data)
            logger.info("Generated embeddings for batch %d", i // batch_size + 1)

        return embeddings

    def close(self) -> None:
        self.client.close()


class OllamaEmbedder:
    """Embeddings from a local Ollama server."""

    def __init__(
        self,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.model = model or config.OLLAMA_EMBEDDINGS_MODEL
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.client = client or httpx.Client(
            timeout=config.OLLAMA_TIMEOUT,
            headers=config.get_api_headers(),
        )

    def _embed(self, texts: list[str]) -> list[np.ndarray]:
        try:
            response = self.client.post(
                f"{self.base_url}/api/embed",
                json={"model": self.model, "input": texts},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError:
            logger.exception("Error calling Ollama embeddings at %s", self.base_url)
            raise

        vectors = data.get("embeddings")
        if not vectors or len(vectors) != len(texts):
            msg = f"Unexpected embeddings response from Ollama: {data}"
            raise RuntimeError(msg)
        return [np.array(vector) for vector in vectors]

    def embed_query(self, text: str) -> np.ndarray:
        return self._embed([text])[0]

    def embed_documents(self, texts: list[str]) -> list[np.ndarray]:
        if not texts:
            return []
        return self._embed(texts)

    def close(self) -> None:
        self.client.close()
