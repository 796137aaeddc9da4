# Core Module
"""Core components for the RAG system."""

from .models import AnswerStatus, CourseDocument, GraphState, RAGResponse

__all__ = [
    "AnswerStatus",
    "CourseDocument",
    "GraphState",
    "RAGResponse",
]
