"""Document loading and chunking for vector store ingestion."""

from pathlib import Path

import pypdf

from .config import config
from .models import DocumentChunk

logger = config.get_logger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}

# Preferred break points, strongest first
SEPARATORS = ("\n\n", "\n", " ")


class DocumentLoader:
    """Reads PDF and plain-text documents."""

    @staticmethod
    def load_pdf(file_path: Path) -> str:
        """Extract the text of every page of a PDF.

        Returns:
            Page texts joined with newlines.
        """
        try:
            with file_path.open("rb") as file:
                reader = pypdf.PdfReader(file)
                pages = [page.extract_text() or "" for page in reader.pages]
        except Exception:
            logger.exception("Error loading PDF %s", file_path)
            raise
        logger.info("Loaded %d pages from %s", len(pages), file_path.name)
        return "\n".join(pages)

    @staticmethod
    def load_text(file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except Exception:
            logger.exception("Error loading text file %s", file_path)
            raise

    @classmethod
    def load_document(cls, file_path: Path) -> str:
        """Load document based on file extension.

        Returns:
            The text content of the document.

        Raises:
            ValueError: If the file type is not supported.
        """
        suffix = file_path.suffix.lower()
        if suffix == ".pdf":
            return cls.load_pdf(file_path)
        if suffix in TEXT_SUFFIXES:
            return cls.load_text(file_path)
        msg = f"Unsupported file type: {suffix}"
        raise ValueError(msg)


class TextChunker:
    """Fixed-size chunks with overlap, cut at paragraph, line or word breaks."""

    def __init__(self, chunk_size: int | None = None, overlap: int | None = None) -> None:
        """Initialize the chunker.

        Args:
            chunk_size: Maximum characters per chunk. If None, uses
                config.CHUNK_SIZE.
            overlap: Characters shared by consecutive chunks. If None, uses
                config.CHUNK_OVERLAP.

        Raises:
            ValueError: If overlap is not smaller than chunk_size.
        """
        self.chunk_size = chunk_size if chunk_size is not None else config.CHUNK_SIZE
        self.overlap = overlap if overlap is not None else config.CHUNK_OVERLAP
        if self.chunk_size <= 0 or not 0 <= self.overlap < self.chunk_size:
            msg = (
                f"Invalid chunking parameters: chunk_size={self.chunk_size}, "
                f"overlap={self.overlap}"
            )
            raise ValueError(msg)

    def _find_end(self, text: str, start: int) -> int:
        end = start + self.chunk_size
        if end >= len(text):
            return len(text)
        window = text[start:end]
        for separator in SEPARATORS:
            cut = window.rfind(separator)
            # Never cut in the first half, chunks would get too small
            if cut > self.chunk_size // 2:
                return start + cut + len(separator)
        return end

    def chunk_text(self, text: str, source: str = "document") -> list[DocumentChunk]:
        """Split text into overlapping chunks tagged with their source.

        Returns:
            Non-empty chunks in document order.
        """
        chunks: list[DocumentChunk] = []
        start = 0

        while start < len(text):
            end = self._find_end(text, start)
            content = text[start:end].strip()
            if content:
                chunks.append(
                    DocumentChunk(
                        content=content,
                        metadata={
                            "source": source,
                            "chunk_id": len(chunks),
                            "start_char": start,
                            "end_char": end,
                        },
                    )
                )
            if end >= len(text):
                break
            start = max(end - self.overlap, start + 1)

        logger.info("Split %s into %d chunks", source, len(chunks))
        return chunks
