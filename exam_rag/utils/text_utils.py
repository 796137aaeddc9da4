"""
Text Utilities
==============

Tokenisation and matching helpers shared by embedding and reranking.
"""

import re
from functools import lru_cache
from typing import List, Pattern

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize_words(text: str, min_length: int = 3) -> List[str]:
    """
    Split text into lower-cased words with punctuation removed.

    Args:
        text: Input text
        min_length: Minimum word length to keep

    Returns:
        List of words in text order (duplicates kept)
    """
    if not text:
        return []

    cleaned = _NON_WORD.sub(" ", text.lower())
    return [word for word in cleaned.split() if len(word) >= min_length]


@lru_cache(maxsize=4096)
def word_pattern(word: str) -> Pattern[str]:
    """Compiled case-insensitive whole-word pattern for a term."""
    return re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)


@lru_cache(maxsize=4096)
def sentence_start_pattern(word: str) -> Pattern[str]:
    """Pattern matching a term at the start of text or right after '. '."""
    return re.compile(rf"(?:^|\. ){re.escape(word)}\b", re.IGNORECASE)


def count_whole_word(text: str, word: str) -> int:
    """Count whole-word, case-insensitive occurrences of word in text."""
    if not text or not word:
        return 0
    return len(word_pattern(word).findall(text))


def contains_whole_word(text: str, word: str) -> bool:
    """Check whether word occurs in text as a whole word."""
    if not text or not word:
        return False
    return word_pattern(word).search(text) is not None


def truncate_text(
    text: str,
    max_length: int,
    suffix: str = "...",
    word_boundary: bool = True
) -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length (including suffix)
        suffix: Suffix to add when truncated
        word_boundary: Whether to truncate at word boundaries

    Returns:
        Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    truncate_at = max_length - len(suffix)
    if truncate_at <= 0:
        return suffix[:max_length]

    truncated = text[:truncate_at]

    if word_boundary:
        last_space = truncated.rfind(' ')
        if last_space > truncate_at // 2:
            truncated = truncated[:last_space]

    return truncated.rstrip() + suffix


def unique_in_order(values: List[str]) -> List[str]:
    """Drop empty values and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result
