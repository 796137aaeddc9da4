# Ingestor Module
"""Vocabulary loading, embeddings and corpus metadata."""

from .config import DEFAULT_CACHE_SIZE
from .vocabulary import SubjectProfile, SubjectVocabulary, load_vocabulary
from .embeddings import EmbeddingManager
from .metadata_utils import corpus_hash, content_checksum, normalize_documents

__all__ = [
    "DEFAULT_CACHE_SIZE",
    "SubjectProfile",
    "SubjectVocabulary",
    "load_vocabulary",
    "EmbeddingManager",
    "corpus_hash",
    "content_checksum",
    "normalize_documents",
]
