"""
Response Data Structures
========================

Tagged answer results for the generator and the RAG pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .entities import SourceDocument


class AnswerStatus(str, Enum):
    """How an answer was produced."""

    ANSWERED = "answered"                            # Grounded LLM answer
    NO_CONTEXT = "no_context"                        # LLM answer without documents
    NO_RELEVANT_DOCUMENTS = "no_relevant_documents"  # Nothing passed the reranker
    INSUFFICIENT_CONTEXT = "insufficient_context"    # LLM said the context was not enough
    EMPTY_RESPONSE = "empty_response"                # LLM returned nothing
    GENERATION_ERROR = "generation_error"            # LLM call raised
    PIPELINE_ERROR = "pipeline_error"                # Anything else went wrong

    @property
    def is_degraded(self) -> bool:
        """True for every fallback answer."""
        return self is not AnswerStatus.ANSWERED


@dataclass
class GenerationResult:
    """Answer text from the generator together with how it was obtained."""
    answer: str
    status: AnswerStatus
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.status.is_degraded


@dataclass
class RAGResponse:
    """
    Complete response from the RAG pipeline.

    ``response`` is always displayable text; ``status`` tells callers
    whether it is a grounded answer or one of the fallbacks.
    """
    query: str
    response: str
    source_documents: List[SourceDocument]
    status: AnswerStatus
    processing_time: float = 0.0
    error: Optional[str] = None
    image_analysis: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_degraded(self) -> bool:
        return self.status.is_degraded

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "query": self.query,
            "response": self.response,
            "source_documents": [doc.to_dict() for doc in self.source_documents],
            "status": self.status.value,
            "degraded": self.is_degraded,
            "processing_time": self.processing_time,
            "metadata": self.metadata,
        }
        if self.error:
            result["error"] = self.error
        if self.image_analysis is not None:
            result["image_analysis"] = self.image_analysis
        return result

    @classmethod
    def error_response(
        cls,
        query: str,
        error: str,
        response: str,
        processing_time: float = 0.0
    ) -> "RAGResponse":
        """Create a pipeline-error response with no sources."""
        return cls(
            query=query,
            response=response,
            source_documents=[],
            status=AnswerStatus.PIPELINE_ERROR,
            processing_time=processing_time,
            error=error,
            metadata={"error": error},
        )
