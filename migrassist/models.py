"""Data models and collaborator capabilities for the RAG chat backend."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np

PromptMessage = dict[str, str]


@dataclass
class DocumentChunk:
    """Represents a chunk of text from a document."""

    content: str
    metadata: dict[str, Any]
    embedding: np.ndarray | None = None


@dataclass(frozen=True)
class RetrievedDocument:
    """A search hit used as prompt context."""

    source_id: str
    content: str


@runtime_checkable
class Embedder(Protocol):
    """Anything that can turn text into embedding vectors."""

    def embed_query(self, text: str) -> np.ndarray: ...

    def embed_documents(self, texts: list[str]) -> list[np.ndarray]: ...


@runtime_checkable
class ChatModel(Protocol):
    """A chat model that emits its answer incrementally."""

    def stream(self, messages: Sequence[PromptMessage]) -> Iterator[str]: ...


@runtime_checkable
class VectorStore(Protocol):
    """Similarity search over embedded document chunks."""

    def similarity_search(self, query: str, k: int) -> list[RetrievedDocument]: ...

    def add_chunks(self, chunks: list[DocumentChunk]) -> None: ...
