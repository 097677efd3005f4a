"""FAISS-backed local vector storage with SQLite metadata."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import faiss
import numpy as np

from migrassist.config import config
from migrassist.models import DocumentChunk, RetrievedDocument
from migrassist.vector_store.base import SQLiteMetadataStore

if TYPE_CHECKING:
    from migrassist.models import Embedder

logger = config.get_logger(__name__)

INDEX_FILENAME = "index.faiss"
METADATA_FILENAME = "metadata.db"


class FaissVectorStore:
    """Vector storage using FAISS for embeddings and SQLite for metadata."""

    backend = "faiss"

    def __init__(self, directory: Path, embedder: Embedder) -> None:
        """Configure a store rooted at ``directory``.

        The index starts empty; use :meth:`load` to open a persisted one.
        """
        self.directory = Path(directory)
        self.index_path = self.directory / INDEX_FILENAME
        self.embedder = embedder
        self.index: faiss.IndexIDMap | None = None
        self.metadata = SQLiteMetadataStore(self.directory / METADATA_FILENAME)

    @classmethod
    def load(cls, directory: Path, embedder: Embedder) -> FaissVectorStore:
        """Open a previously persisted index.

        Raises:
            FileNotFoundError: If no index was saved under ``directory``.
        """  # noqa: DOC201
        index_path = Path(directory) / INDEX_FILENAME
        if not index_path.exists():
            msg = f"FAISS index not found at {index_path}"
            raise FileNotFoundError(msg)

        store = cls(directory, embedder)
        index = faiss.read_index(str(index_path))
        if not isinstance(index, (faiss.IndexIDMap, faiss.IndexIDMap2)):
            logger.warning(
                "Loaded FAISS index is %s; wrapping with IndexIDMap to enable IDs",
                type(index).__name__,
            )
            index = faiss.IndexIDMap(index)
        store.index = index
        logger.info("Loaded FAISS index from %s with %d vectors", index_path, index.ntotal)
        return store

    @staticmethod
    def _normalize_embedding(embedding: np.ndarray) -> np.ndarray:
        """Normalize embedding for cosine similarity using inner product search.

        Returns:
            Normalized float32 embedding vector.
        """
        vector = np.array(embedding, dtype="float32")
        if np.linalg.norm(vector) == 0:
            return vector
        faiss.normalize_L2(vector.reshape(1, -1))
        return vector

    def _init_index(self, dimension: int) -> None:
        self.index = faiss.IndexIDMap(faiss.IndexFlatIP(dimension))
        logger.info("Initialized FAISS IndexIDMap with dimension %d", dimension)

    def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Add embedded chunks to the index and the metadata store.

        Raises:
            ValueError: If embedding dimension mismatches the index.
        """
        embedded = [chunk for chunk in chunks if chunk.embedding is not None]
        if len(embedded) < len(chunks):
            logger.warning("Skipping %d chunks without embedding", len(chunks) - len(embedded))
        if not embedded:
            return

        vectors = np.vstack([
            self._normalize_embedding(chunk.embedding) for chunk in embedded
        ])
        if self.index is None:
            self._init_index(vectors.shape[1])
        elif vectors.shape[1] != self.index.d:
            msg = (
                f"Embedding dimension {vectors.shape[1]} does not match "
                f"FAISS index dimension {self.index.d}"
            )
            raise ValueError(msg)

        vector_ids = self.metadata.insert_chunks(embedded)
        self.index.add_with_ids(vectors, np.asarray(vector_ids, dtype="int64"))  # pyright: ignore[reportCallIssue]
        logger.info("Added %d vectors to FAISS index", len(vector_ids))

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 3,
    ) -> list[tuple[DocumentChunk, float]]:
        """Search similar chunks using the FAISS index.

        Returns:
            Ranked list of (DocumentChunk, score) tuples, best first.
        """
        index = self.index
        if index is None or index.ntotal == 0:
            logger.warning("FAISS index is empty; returning no results")
            return []

        query = self._normalize_embedding(query_embedding).reshape(1, -1)
        scores, vector_ids = index.search(query, min(top_k, index.ntotal))  # pyright: ignore[reportCallIssue]

        hits = [
            (int(vector_id), float(score))
            for score, vector_id in zip(scores[0], vector_ids[0], strict=True)
            if int(vector_id) != -1  # faiss pads missing results with -1
        ]
        chunks = self.metadata.fetch_by_vector_ids([vector_id for vector_id, _ in hits])
        return [
            (chunks[vector_id], score) for vector_id, score in hits if vector_id in chunks
        ]

    def similarity_search(self, query: str, k: int) -> list[RetrievedDocument]:
        """Embed ``query`` and return the ``k`` closest documents."""  # noqa: DOC201
        results = self.search(self.embedder.embed_query(query), top_k=k)
        return [
            RetrievedDocument(
                source_id=str(chunk.metadata.get("source", "unknown")),
                content=chunk.content,
            )
            for chunk, _score in results
        ]

    def save(self) -> None:
        """Persist the FAISS index to disk."""
        if self.index is None:
            logger.warning("No FAISS index to save")
            return
        self.directory.mkdir(exist_ok=True, parents=True)
        faiss.write_index(self.index, str(self.index_path))
        logger.info("Saved FAISS index to %s", self.index_path)
