"""SQLite metadata shared by the local vector store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from migrassist.config import config
from migrassist.models import DocumentChunk

logger = config.get_logger(__name__)

_CHUNK_COLUMNS = """
    c.id,
    c.content,
    c.chunk_id,
    c.start_char,
    c.end_char,
    c.vector_id,
    d.source
"""


class SQLiteMetadataStore:
    """Maps FAISS vector ids to chunk text and source document names."""

    def __init__(self, db_path: Path) -> None:
        """Open the metadata database and ensure the schema exists."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self._create_tables()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _create_tables(self) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source TEXT NOT NULL UNIQUE,
                    processed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS chunks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    document_id INTEGER NOT NULL,
                    chunk_id INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    start_char INTEGER,
                    end_char INTEGER,
                    vector_id INTEGER UNIQUE,
                    FOREIGN KEY (document_id) REFERENCES documents (id)
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_chunks_document ON chunks(document_id)"
            )
            conn.commit()

    @staticmethod
    def _upsert_document(cursor: sqlite3.Cursor, source: str) -> int:
        """Insert document metadata if missing and return its id.

        Raises:
            RuntimeError: If the document id cannot be retrieved.

        Returns:
            Document id from the metadata store.
        """
        cursor.execute("INSERT OR IGNORE INTO documents (source) VALUES (?)", (source,))
        cursor.execute("SELECT id FROM documents WHERE source = ?", (source,))
        row = cursor.fetchone()
        if row is None:
            msg = f"Failed to upsert document for source '{source}'"
            raise RuntimeError(msg)
        return int(row[0])

    def insert_chunks(self, chunks: list[DocumentChunk]) -> list[int]:
        """Persist chunk rows and return the vector id assigned to each.

        The vector id is the chunk's row id, so it stays unique across
        ingestion runs against the same database.

        Raises:
            RuntimeError: If a chunk row cannot be inserted.
        """  # noqa: DOC201
        vector_ids: list[int] = []
        with self._connect() as conn:
            cursor = conn.cursor()
            for chunk in chunks:
                document_id = self._upsert_document(
                    cursor, chunk.metadata.get("source", "unknown")
                )
                cursor.execute(
                    """
                    INSERT INTO chunks (
                        document_id, chunk_id, content, start_char, end_char
                    )
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        document_id,
                        chunk.metadata.get("chunk_id", 0),
                        chunk.content,
                        chunk.metadata.get("start_char", 0),
                        chunk.metadata.get("end_char", len(chunk.content)),
                    ),
                )
                row_id = cursor.lastrowid
                if row_id is None:
                    msg = "Failed to insert chunk row"
                    raise RuntimeError(msg)
                cursor.execute(
                    "UPDATE chunks SET vector_id = ? WHERE id = ?", (row_id, row_id)
                )
                chunk.metadata["vector_id"] = int(row_id)
                vector_ids.append(int(row_id))
            conn.commit()
        return vector_ids

    @staticmethod
    def _build_chunk(row: tuple) -> DocumentChunk:
        chunk_db_id, content, chunk_id, start_char, end_char, vector_id, source = row
        return DocumentChunk(
            content=content,
            metadata={
                "chunk_db_id": chunk_db_id,
                "source": source,
                "chunk_id": chunk_id,
                "start_char": start_char,
                "end_char": end_char,
                "vector_id": vector_id,
            },
        )

    def fetch_by_vector_ids(self, vector_ids: list[int]) -> dict[int, DocumentChunk]:
        """Look up chunks for a set of vector ids.

        Returns:
            Mapping of vector id to chunk; unknown ids are absent.
        """
        if not vector_ids:
            return {}
        placeholders = ", ".join("?" for _ in vector_ids)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_CHUNK_COLUMNS}
                FROM chunks c
                JOIN documents d ON c.document_id = d.id
                WHERE c.vector_id IN ({placeholders})
                """,  # noqa: S608
                [int(v) for v in vector_ids],
            )
            rows = cursor.fetchall()
        chunks = [self._build_chunk(row) for row in rows]
        return {chunk.metadata["vector_id"]: chunk for chunk in chunks}

    def count(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM chunks").fetchone()
        return int(row[0])
