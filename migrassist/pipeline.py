"""RAG pipeline: retrieve context, prompt the chat model, ingest documents."""

from collections.abc import Iterator
from pathlib import Path

from .backends import Backend
from .config import RETRIEVAL_TOP_K, config
from .document_processing import DocumentLoader, TextChunker
from .models import RetrievedDocument
from .prompts import build_prompt_messages

logger = config.get_logger(__name__)


class RAGPipeline:
    """Retrieval-augmented generation over one backend."""

    def __init__(self, backend: Backend, chunker: TextChunker | None = None) -> None:
        """Initialize the pipeline.

        Args:
            backend: Embedder, chat model and vector store to work with.
            chunker: Chunker used by :meth:`process_document`. If None, uses
                the configured chunk size and overlap.
        """
        self.backend = backend
        self.chunker = chunker or TextChunker()

    def retrieve(self, question: str) -> list[RetrievedDocument]:
        """Fetch the top matches for ``question``, in store order."""  # noqa: DOC201
        documents = self.backend.vector_store.similarity_search(
            question, k=RETRIEVAL_TOP_K
        )
        logger.info(
            "Retrieved %d documents: %s",
            len(documents),
            ", ".join(doc.source_id for doc in documents),
        )
        return documents

    def stream(self, question: str) -> Iterator[str]:
        """Retrieve context now and return the model's lazy fragment stream.

        Returns:
            Iterator over answer fragments; generation starts on first read.
        """
        documents = self.retrieve(question)
        messages = build_prompt_messages(question, documents)
        return self.backend.chat_model.stream(messages)

    def process_document(self, file_path: Path) -> int:
        """Load, chunk, embed and store a document.

        Returns:
            Number of chunks added to the vector store.
        """
        logger.info("Starting ingestion for document: %s", file_path)

        text = DocumentLoader.load_document(file_path)
        chunks = self.chunker.chunk_text(text, source=file_path.name)
        if not chunks:
            logger.warning("No text extracted from %s", file_path)
            return 0

        embeddings = self.backend.embedder.embed_documents(
            [chunk.content for chunk in chunks]
        )
        for chunk, embedding in zip(chunks, embeddings, strict=True):
            chunk.embedding = embedding

        store = self.backend.vector_store
        store.add_chunks(chunks)
        save = getattr(store, "save", None)
        if callable(save):
            save()

        logger.info("Document %s ingested with %d chunks", file_path.name, len(chunks))
        return len(chunks)
