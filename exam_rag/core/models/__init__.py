# Core Models Module
"""Data models for the RAG system."""

from .entities import CourseDocument, ScoredCandidate, SourceDocument
from .response import AnswerStatus, GenerationResult, RAGResponse
from .state import GraphState, PipelineState, PipelineStatus

__all__ = [
    "CourseDocument",
    "ScoredCandidate",
    "SourceDocument",
    "AnswerStatus",
    "GenerationResult",
    "RAGResponse",
    "GraphState",
    "PipelineState",
    "PipelineStatus",
]
