"""Vector store adapters."""

from .faiss_store import FaissVectorStore
from .qdrant_store import QdrantVectorStore

__all__ = ["FaissVectorStore", "QdrantVectorStore"]
