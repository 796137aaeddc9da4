"""
Exception hierarchy for the exam assistant RAG core.

Errors raised by collaborators (document sources, the LLM client) and by
configuration handling. The pipeline converts all of them into degraded
answers at its boundary.
"""

from typing import Any, Dict, Optional


class RAGException(Exception):
    """Base exception for all RAG core errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class DocumentSourceError(RAGException):
    """Raised when the document source cannot produce a snapshot."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class GenerationError(RAGException):
    """Raised when a text or vision generation call fails."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if model:
            details["model"] = model
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


class ConfigurationError(RAGException):
    """Raised when configuration or vocabulary data is invalid."""

    pass
