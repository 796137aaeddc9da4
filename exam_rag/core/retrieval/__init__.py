# Core Retrieval Module
"""In-memory vector search and subject-aware reranking."""

from .vector_store import InMemoryVectorStore, IndexedEntry, VectorIndex
from .reranker import SubjectAwareReranker

__all__ = [
    "InMemoryVectorStore",
    "IndexedEntry",
    "VectorIndex",
    "SubjectAwareReranker",
]
