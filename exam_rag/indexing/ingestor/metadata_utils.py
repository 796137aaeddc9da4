"""
Metadata Utilities
==================

Corpus hashing and document normalisation for index (re)builds.
"""

import hashlib
import logging
from typing import Any, Iterable, List, Tuple

from exam_rag.core.models.entities import CourseDocument

logger = logging.getLogger(__name__)

EMPTY_CORPUS_HASH = "empty"


def content_checksum(content: str) -> str:
    """Short checksum of document content."""
    digest = hashlib.sha256((content or "").encode("utf-8", errors="ignore"))
    return digest.hexdigest()[:16]


def document_fingerprint(doc: CourseDocument) -> str:
    """Identity of a document for change detection, content included."""
    return (
        f"{doc.id}-{doc.title}-{doc.subject}-{doc.created_at}"
        f"-{len(doc.content)}:{content_checksum(doc.content)}"
    )


def corpus_hash(documents: Iterable[CourseDocument]) -> str:
    """
    Hash a corpus snapshot.

    Order-sensitive, like the document listing it is computed from.
    Returns ``EMPTY_CORPUS_HASH`` for an empty corpus.
    """
    fingerprints = [document_fingerprint(doc) for doc in documents]
    if not fingerprints:
        return EMPTY_CORPUS_HASH

    composite = "|".join(fingerprints)
    return hashlib.sha256(composite.encode("utf-8", errors="ignore")).hexdigest()[:16]


def normalize_documents(documents: Iterable[Any]) -> Tuple[List[CourseDocument], int]:
    """
    Convert raw rows into CourseDocuments, skipping malformed ones.

    Returns:
        Tuple of (valid documents, number of skipped rows)
    """
    valid: List[CourseDocument] = []
    skipped = 0

    for position, raw in enumerate(documents or []):
        try:
            valid.append(CourseDocument.from_mapping(raw))
        except (TypeError, ValueError) as e:
            skipped += 1
            logger.warning(f"[documents] Skipping malformed document at position {position}: {e}")

    return valid, skipped
