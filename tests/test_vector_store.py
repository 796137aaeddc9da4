"""Tests for the in-memory vector store."""

from langchain_core.documents import Document

from exam_rag.core.retrieval import InMemoryVectorStore


def _chunk(content: str, chunk_id: str, subject: str = "Mathematics") -> Document:
    return Document(page_content=content, metadata={"document_id": chunk_id, "title": chunk_id, "subject": subject})


class TestInMemoryVectorStore:
    """Index snapshots and linear search."""

    def test_empty_store_search(self) -> None:
        """Should return an empty list for an empty corpus."""
        assert InMemoryVectorStore().search("algebra", 5) == []

    def test_non_positive_k(self) -> None:
        """Should return nothing for k <= 0."""
        store = InMemoryVectorStore()
        store.replace([_chunk("algebra equation", "a")])

        assert store.search("algebra", 0) == []
        assert store.search("algebra", -3) == []

    def test_k_larger_than_corpus(self) -> None:
        """Should return every entry when k exceeds the corpus size."""
        store = InMemoryVectorStore()
        store.replace([_chunk("algebra equation", "a"), _chunk("ancient empire", "b", "History")])

        assert len(store.search("algebra", 50)) == 2

    def test_sorted_by_similarity(self) -> None:
        """Should return candidates best first."""
        store = InMemoryVectorStore()
        store.replace([
            _chunk("The empire fought a long war.", "history", "History"),
            _chunk("Solve the algebra equation for the variable.", "algebra"),
            _chunk("Cells and photosynthesis in biology.", "science", "Science"),
        ])

        results = store.search("algebra equation variable", 3)

        similarities = [candidate.similarity for candidate in results]
        assert similarities == sorted(similarities, reverse=True)
        assert results[0].document_id == "algebra"

    def test_ties_keep_insertion_order(self) -> None:
        """Should keep insertion order for equal similarity."""
        store = InMemoryVectorStore()
        store.replace([_chunk("same algebra text", "first"), _chunk("same algebra text", "second")])

        results = store.search("algebra", 2)

        assert [candidate.document_id for candidate in results] == ["first", "second"]

    def test_replace_swaps_whole_corpus(self) -> None:
        """Should replace the old entries and leave the previous snapshot intact."""
        store = InMemoryVectorStore()
        store.replace([_chunk("algebra", "a"), _chunk("geometry", "b")])
        old_index = store.swap(store.build_index([_chunk("ancient empire", "c", "History")]))

        assert len(old_index) == 2
        assert store.get_document_count() == 1
        assert [candidate.document_id for candidate in store.search("empire", 5)] == ["c"]

    def test_add_documents_appends(self) -> None:
        """Should append to the existing corpus."""
        store = InMemoryVectorStore()
        store.replace([_chunk("algebra", "a")])

        assert store.add_documents([_chunk("geometry", "b")]) == 2
        assert store.get_document_count() == 2

    def test_clear(self) -> None:
        """Should empty the store."""
        store = InMemoryVectorStore()
        store.replace([_chunk("algebra", "a")])
        store.clear()

        assert store.get_document_count() == 0
        assert store.search("algebra", 5) == []

    def test_subjects(self) -> None:
        """Should list distinct chunk subjects in insertion order."""
        store = InMemoryVectorStore()
        store.replace([_chunk("a", "1"), _chunk("b", "2", "History"), _chunk("c", "3")])

        assert store.subjects() == ["Mathematics", "History"]
