# Indexing Module - Corpus Preparation
"""
Corpus preparation components for the RAG system.

- chunker: overlapping character-window chunking
- ingestor: subject vocabulary, embeddings and corpus hashing
"""

from .chunker import DocumentProcessor
from .ingestor import EmbeddingManager, SubjectVocabulary

__all__ = [
    "DocumentProcessor",
    "EmbeddingManager",
    "SubjectVocabulary",
]
