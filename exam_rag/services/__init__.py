# Services Module
"""High-level service components: the RAG pipeline and its collaborators."""

from .document_source import (
    DocumentSource,
    JsonFileDocumentSource,
    StaticDocumentSource,
    SupabaseDocumentSource,
)
from .ollama_service import OllamaClient, OllamaResponse
from .rag_service import RAGPipeline

__all__ = [
    "DocumentSource",
    "JsonFileDocumentSource",
    "StaticDocumentSource",
    "SupabaseDocumentSource",
    "OllamaClient",
    "OllamaResponse",
    "RAGPipeline",
]
