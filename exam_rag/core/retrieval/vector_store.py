"""
Vector Store
============

In-memory chunk index with linear similarity search.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from langchain_core.documents import Document

from exam_rag.core.models.entities import ScoredCandidate
from exam_rag.indexing.ingestor.embeddings import EmbeddingManager
from exam_rag.utils.text_utils import truncate_text, unique_in_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexedEntry:
    """A chunk and its vector."""
    chunk: Document
    vector: Tuple[float, ...]


@dataclass(frozen=True)
class VectorIndex:
    """Immutable snapshot of indexed entries, in insertion order."""
    entries: Tuple[IndexedEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)


class InMemoryVectorStore:
    """
    Holds the chunk index for one pipeline.

    Every mutation builds a complete new ``VectorIndex`` and then swaps the
    reference, so a search always runs against one whole snapshot.
    """

    def __init__(self, embedding_manager: Optional[EmbeddingManager] = None):
        """
        Initialize vector store.

        Args:
            embedding_manager: Embeds chunks and queries (default vocabulary if None)
        """
        self.embedding_manager = embedding_manager or EmbeddingManager()
        self._index = VectorIndex()
        logger.info("InMemoryVectorStore initialized")

    def build_index(self, chunks: Iterable[Document]) -> VectorIndex:
        """Embed chunks into a new index without touching the live one."""
        entries = tuple(
            IndexedEntry(chunk=chunk, vector=tuple(self.embedding_manager.embed(chunk.page_content)))
            for chunk in chunks
        )
        return VectorIndex(entries=entries)

    def swap(self, index: VectorIndex) -> VectorIndex:
        """Make index the live snapshot; returns the previous one."""
        previous = self._index
        self._index = index
        return previous

    def replace(self, chunks: Iterable[Document]) -> int:
        """Replace the whole corpus with chunks. Returns the new entry count."""
        index = self.build_index(chunks)
        self.swap(index)
        logger.info(f"[vector_store] Index replaced: entries={len(index)}")
        return len(index)

    def add_documents(self, chunks: Iterable[Document]) -> int:
        """Append chunks to the current corpus. Returns the new entry count."""
        added = self.build_index(chunks)
        current = self._index
        self.swap(VectorIndex(entries=current.entries + added.entries))
        logger.info(f"[vector_store] Added {len(added)} entries (total={len(current) + len(added)})")
        return len(current) + len(added)

    def clear(self) -> None:
        """Empty the store in one step."""
        self.swap(VectorIndex())
        logger.info("[vector_store] Cleared")

    def search(self, query: str, k: int) -> List[ScoredCandidate]:
        """
        Find the k entries most similar to query.

        Args:
            query: Search text
            k: Number of candidates to return

        Returns:
            Candidates sorted by descending similarity; ties keep insertion order
        """
        index = self._index
        if k <= 0 or not index.entries:
            return []

        query_vector = self.embedding_manager.embed(query)
        similarity = self.embedding_manager.similarity

        scored = [
            ScoredCandidate(chunk=entry.chunk, similarity=similarity(query_vector, entry.vector))
            for entry in index.entries
        ]
        scored.sort(key=lambda candidate: candidate.similarity, reverse=True)
        results = scored[:k]

        logger.info(
            f"[search] query='{truncate_text(query, 60)}' entries={len(index)} "
            f"returned={len(results)} (k={k})"
        )
        return results

    def get_document_count(self) -> int:
        """Number of indexed chunks."""
        return len(self._index)

    def subjects(self) -> List[str]:
        """Distinct chunk subjects in insertion order."""
        return unique_in_order([entry.chunk.metadata.get("subject") or "" for entry in self._index.entries])
