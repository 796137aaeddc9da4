"""
Document Processor
==================

Splits course documents into overlapping character windows.
"""

import logging
from typing import Any, Iterable, List

from langchain_core.documents import Document

from exam_rag.core.models.entities import CourseDocument
from exam_rag.indexing.ingestor.metadata_utils import normalize_documents

from .config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


def window_text(text: str, chunk_size: int, chunk_overlap: int) -> List[str]:
    """
    Cut text into windows of ``chunk_size`` sharing ``chunk_overlap`` chars.

    Window ``i`` starts at ``i * (chunk_size - chunk_overlap)``. Dropping the
    first ``chunk_overlap`` characters of every window after the first and
    joining the rest gives back ``text``.
    """
    if not text:
        return []

    step = chunk_size - chunk_overlap
    windows = []
    start = 0
    while True:
        windows.append(text[start:start + chunk_size])
        if start + chunk_size >= len(text):
            break
        start += step
    return windows


class DocumentProcessor:
    """
    Chunks documents for indexing.

    Pure and stateless apart from its configuration; malformed documents
    are skipped instead of raising.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        """
        Initialize processor.

        Args:
            chunk_size: Maximum characters per chunk
            chunk_overlap: Characters repeated at the start of the next chunk
        """
        self.chunk_size = 1
        self.chunk_overlap = 0
        self.configure(chunk_size, chunk_overlap)

    def configure(self, chunk_size: int, chunk_overlap: int) -> None:
        """Apply chunk settings, clamping invalid combinations."""
        if chunk_size < 1:
            logger.warning(f"[chunker] chunk_size={chunk_size} is invalid; using 1")
            chunk_size = 1
        if chunk_overlap < 0:
            logger.warning(f"[chunker] chunk_overlap={chunk_overlap} is negative; using 0")
            chunk_overlap = 0
        if chunk_overlap >= chunk_size:
            logger.warning(
                f"[chunker] chunk_overlap={chunk_overlap} >= chunk_size={chunk_size}; "
                f"clamping to {chunk_size - 1}"
            )
            chunk_overlap = chunk_size - 1

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk(self, documents: Iterable[Any]) -> List[Document]:
        """
        Chunk a corpus snapshot.

        Args:
            documents: CourseDocuments or store rows (mappings)

        Returns:
            Chunks in document order, then chunk order
        """
        valid, skipped = normalize_documents(documents)

        chunks: List[Document] = []
        for doc in valid:
            chunks.extend(self.chunk_document(doc))

        logger.info(
            f"[chunker] documents={len(valid)} skipped={skipped} chunks={len(chunks)} "
            f"(size={self.chunk_size}, overlap={self.chunk_overlap})"
        )
        return chunks

    def chunk_document(self, doc: CourseDocument) -> List[Document]:
        """Chunk one document; empty content gives no chunks."""
        if not doc.content.strip():
            logger.debug(f"[chunker] Document {doc.id} has no content")
            return []

        pieces = window_text(doc.content, self.chunk_size, self.chunk_overlap)
        return [
            Document(
                page_content=piece,
                metadata={
                    "document_id": doc.id,
                    "title": doc.title,
                    "subject": doc.subject,
                    "chunk_index": index,
                    "created_at": doc.created_at,
                },
            )
            for index, piece in enumerate(pieces)
        ]
