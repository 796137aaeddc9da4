# Utils Module
"""Utility functions for the RAG system."""

from .text_utils import (
    tokenize_words,
    count_whole_word,
    contains_whole_word,
    truncate_text,
    unique_in_order,
)

__all__ = [
    "tokenize_words",
    "count_whole_word",
    "contains_whole_word",
    "truncate_text",
    "unique_in_order",
]
