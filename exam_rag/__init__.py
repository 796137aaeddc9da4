# Exam Assistant RAG Package
"""
Retrieval-augmented chat over uploaded course documents.

This package provides:
- Overlapping character-window chunking of course documents
- Subject-aware vocabulary embeddings in an in-process vector index
- Subject-aware reranking with a relevance threshold
- Strict, context-only answer generation with fallback messages
- A LangGraph query pipeline, Flask API and CLI
"""

__version__ = "1.0.0"
