"""Qdrant Cloud vector storage used by the cloud backend."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from qdrant_client import QdrantClient
from qdrant_client.http.models import Distance, PointStruct, VectorParams

from migrassist.config import config
from migrassist.models import DocumentChunk, RetrievedDocument

if TYPE_CHECKING:
    from migrassist.models import Embedder

logger = config.get_logger(__name__)


class QdrantVectorStore:
    """Chunks stored as Qdrant points with ``text`` and ``source`` payload keys."""

    backend = "qdrant"

    def __init__(
        self,
        embedder: Embedder,
        *,
        url: str | None = None,
        api_key: str | None = None,
        collection: str | None = None,
        client: QdrantClient | None = None,
    ) -> None:
        self.embedder = embedder
        self.collection = collection or config.QDRANT_COLLECTION
        self.client = client or QdrantClient(
            url=url or config.QDRANT_URL,
            api_key=api_key or config.get_qdrant_api_key(),
        )

    def _ensure_collection(self, dimension: int) -> None:
        if self.client.collection_exists(self.collection):
            return
        self.client.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
        )
        logger.info(
            "Created Qdrant collection %s with dimension %d", self.collection, dimension
        )

    def add_chunks(self, chunks: list[DocumentChunk]) -> None:
        """Upsert embedded chunks as points."""
        points: list[PointStruct] = []
        for chunk in chunks:
            if chunk.embedding is None:
                logger.warning(
                    "Skipping chunk %s without embedding", chunk.metadata.get("chunk_id")
                )
                continue
            payload = {**chunk.metadata, "text": chunk.content}
            payload.setdefault("source", "unknown")
            points.append(
                PointStruct(
                    id=str(uuid.uuid4()),
                    vector=[float(x) for x in chunk.embedding],
                    payload=payload,
                )
            )

        if not points:
            return
        self._ensure_collection(len(points[0].vector))
        self.client.upsert(collection_name=self.collection, points=points)
        logger.info("Upserted %d points into %s", len(points), self.collection)

    def similarity_search(self, query: str, k: int) -> list[RetrievedDocument]:
        """Embed ``query`` and return the ``k`` closest documents."""  # noqa: DOC201
        query_vector = [float(x) for x in self.embedder.embed_query(query)]
        response = self.client.query_points(
            collection_name=self.collection,
            query=query_vector,
            limit=k,
            with_payload=True,
        )
        documents = []
        for point in response.points:
            payload = point.payload or {}
            documents.append(
                RetrievedDocument(
                    source_id=str(payload.get("source", "unknown")),
                    content=str(payload.get("text", "")),
                )
            )
        return documents

    def close(self) -> None:
        self.client.close()
