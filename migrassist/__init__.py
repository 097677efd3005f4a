"""Migration assistant - streaming RAG chat API."""

from .backends import Backend, BackendFactory
from .chat_models import AzureOpenAIChatModel, OllamaChatModel
from .document_processing import DocumentLoader, TextChunker
from .embeddings import AzureOpenAIEmbedder, OllamaEmbedder
from .handler import ChatHandler
from .models import DocumentChunk, RetrievedDocument
from .pipeline import RAGPipeline
from .vector_store import FaissVectorStore, QdrantVectorStore

__all__ = [
    "AzureOpenAIChatModel",
    "AzureOpenAIEmbedder",
    "Backend",
    "BackendFactory",
    "ChatHandler",
    "DocumentChunk",
    "DocumentLoader",
    "FaissVectorStore",
    "OllamaChatModel",
    "OllamaEmbedder",
    "QdrantVectorStore",
    "RAGPipeline",
    "RetrievedDocument",
    "TextChunker",
]
