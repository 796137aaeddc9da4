# Chunker Module
"""Overlapping character-window chunking for course documents."""

from .config import DEFAULT_CHUNK_SIZE, DEFAULT_CHUNK_OVERLAP
from .chunker import DocumentProcessor, window_text

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
    "DocumentProcessor",
    "window_text",
]
