"""Backend selection: Azure OpenAI + Qdrant in the cloud, Ollama + FAISS locally."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .chat_models import AzureOpenAIChatModel, OllamaChatModel
from .config import Config, config
from .embeddings import AzureOpenAIEmbedder, OllamaEmbedder
from .vector_store import FaissVectorStore, QdrantVectorStore

if TYPE_CHECKING:
    from .models import ChatModel, Embedder, VectorStore

logger = config.get_logger(__name__)

BackendKind = Literal["cloud", "local"]


@dataclass(frozen=True)
class Backend:
    """The three collaborators one request is served with."""

    kind: BackendKind
    embedder: Embedder
    chat_model: ChatModel
    vector_store: VectorStore

    def close(self) -> None:
        """Release the network clients held by each collaborator."""
        for part in (self.embedder, self.chat_model, self.vector_store):
            close = getattr(part, "close", None)
            if callable(close):
                close()


class BackendFactory:
    """Builds the backend selected by configuration.

    By default a fresh backend is built for every call. With ``cache`` on,
    the first backend built is reused for the life of the process; settings
    are only read at start-up, so a restart is the only invalidation needed.
    """

    def __init__(
        self,
        settings: type[Config] | Config = config,
        *,
        cache: bool | None = None,
    ) -> None:
        self.settings = settings
        self.cache = settings.BACKEND_CACHE if cache is None else cache
        self._cached: Backend | None = None
        self._lock = threading.Lock()

    @property
    def kind(self) -> BackendKind:
        return "cloud" if self.settings.is_cloud() else "local"

    def create(self) -> Backend:
        """Return the configured backend, building it if needed."""  # noqa: DOC201
        if not self.cache:
            return self._build()
        with self._lock:
            if self._cached is None:
                self._cached = self._build()
            return self._cached

    def release(self, backend: Backend) -> None:
        """Close a backend handed out by :meth:`create` unless it is cached."""
        if not self.cache:
            backend.close()

    def create_for_ingestion(self) -> Backend:
        """Build an uncached backend whose local index may not exist yet."""  # noqa: DOC201
        return self._build(create_missing=True)

    def _build(self, *, create_missing: bool = False) -> Backend:
        if self.kind == "cloud":
            return self._build_cloud()
        return self._build_local(create_missing=create_missing)

    def _build_cloud(self) -> Backend:
        settings = self.settings
        api_key = settings.get_azure_openai_api_key()
        endpoint = settings.AZURE_OPENAI_API_ENDPOINT

        embedder = AzureOpenAIEmbedder(
            api_key=api_key,
            deployment=settings.AZURE_OPENAI_EMBEDDING_DEPLOYMENT,
            endpoint=endpoint,
        )
        chat_model = AzureOpenAIChatModel(
            api_key=api_key,
            deployment=settings.AZURE_OPENAI_CHAT_DEPLOYMENT,
            endpoint=endpoint,
        )
        vector_store = QdrantVectorStore(
            embedder,
            url=settings.QDRANT_URL,
            api_key=settings.get_qdrant_api_key(),
            collection=settings.QDRANT_COLLECTION,
        )
        return Backend("cloud", embedder, chat_model, vector_store)

    def _build_local(self, *, create_missing: bool = False) -> Backend:
        logger.info("No Azure OpenAI endpoint set, using Ollama models and local DB")
        settings = self.settings

        embedder = OllamaEmbedder(
            model=settings.OLLAMA_EMBEDDINGS_MODEL,
            base_url=settings.OLLAMA_BASE_URL,
        )
        chat_model = OllamaChatModel(
            model=settings.OLLAMA_CHAT_MODEL,
            base_url=settings.OLLAMA_BASE_URL,
        )
        try:
            vector_store = FaissVectorStore.load(settings.FAISS_STORE_DIR, embedder)
        except FileNotFoundError:
            if not create_missing:
                embedder.close()
                chat_model.close()
                raise
            logger.info("Creating a new FAISS store in %s", settings.FAISS_STORE_DIR)
            vector_store = FaissVectorStore(settings.FAISS_STORE_DIR, embedder)
        return Backend("local", embedder, chat_model, vector_store)
