"""
Entity Models
=============

Course documents, retrieval candidates and reported source documents.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from langchain_core.documents import Document


@dataclass(frozen=True)
class CourseDocument:
    """
    Snapshot of an uploaded course document.

    Attributes:
        id: Identifier assigned by the document store
        title: Document title
        subject: Subject label (e.g. "Mathematics")
        content: Extracted plain text
        created_at: Creation timestamp as provided by the store
    """
    id: str
    title: str
    subject: str
    content: str
    created_at: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CourseDocument":
        """
        Build a document from a store row.

        Accepts both ``created_at`` and ``createdAt``. Missing text fields
        become empty strings.

        Raises:
            TypeError: If data is not a mapping
            ValueError: If the row has no id
        """
        if isinstance(data, CourseDocument):
            return data
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")

        doc_id = data.get("id")
        if doc_id is None or str(doc_id).strip() == "":
            raise ValueError("Document has no id")

        created_at = data.get("created_at", data.get("createdAt"))
        return cls(
            id=str(doc_id),
            title=str(data.get("title") or ""),
            subject=str(data.get("subject") or ""),
            content=str(data.get("content") or ""),
            created_at=str(created_at) if created_at is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "subject": self.subject,
            "content": self.content,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class SourceDocument:
    """A document that contributed context to an answer."""
    id: str
    title: str
    subject: str
    similarity: float
    rerank_score: Optional[float]
    relevance_score: Optional[float]
    subject_match: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "subject": self.subject,
            "similarity": self.similarity,
            "rerank_score": self.rerank_score,
            "relevance_score": self.relevance_score,
            "subject_match": self.subject_match,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """
    A chunk scored for one query.

    ``similarity`` comes from the vector store; the rerank fields are filled
    in by the reranker, which returns new candidates instead of mutating.
    """
    chunk: Document
    similarity: float
    rerank_score: Optional[float] = None
    relevance_score: Optional[float] = None
    subject_match: bool = False

    @property
    def content(self) -> str:
        return self.chunk.page_content or ""

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.chunk.metadata or {}

    @property
    def title(self) -> str:
        return self.metadata.get("title") or ""

    @property
    def subject(self) -> str:
        return self.metadata.get("subject") or ""

    @property
    def document_id(self) -> str:
        return self.metadata.get("document_id") or ""

    def with_scores(
        self,
        rerank_score: float,
        relevance_score: float,
        subject_match: bool
    ) -> "ScoredCandidate":
        """Return a copy carrying rerank results."""
        return replace(
            self,
            rerank_score=rerank_score,
            relevance_score=relevance_score,
            subject_match=subject_match,
        )

    def to_source(self) -> SourceDocument:
        """Describe this candidate as a source document."""
        return SourceDocument(
            id=self.document_id,
            title=self.title,
            subject=self.subject,
            similarity=self.similarity,
            rerank_score=self.rerank_score,
            relevance_score=self.relevance_score,
            subject_match=self.subject_match,
        )
