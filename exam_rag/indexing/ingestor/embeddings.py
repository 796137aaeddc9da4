"""
Embeddings
==========

Subject-aware feature vectors built from a weighted study vocabulary,
with a weighted cosine similarity and a bounded cache.
"""

import hashlib
import logging
import math
from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence

from exam_rag.utils.text_utils import count_whole_word, tokenize_words

from .config import (
    CHAR_COUNT_SCALE,
    DEFAULT_CACHE_SIZE,
    SUBJECT_FEATURE_WEIGHT,
    WORD_COUNT_SCALE,
)
from .vocabulary import SubjectVocabulary

logger = logging.getLogger(__name__)


class EmbeddingManager:
    """
    Turns text into fixed-length vectors.

    Layout: one weighted relative frequency per vocabulary term, then two
    length statistics, then one score per subject. The layout depends only
    on the vocabulary, so every vector from one manager has the same length.
    """

    STATISTICS_FEATURES = 2

    def __init__(
        self,
        vocabulary: Optional[SubjectVocabulary] = None,
        cache_size: int = DEFAULT_CACHE_SIZE
    ):
        """
        Initialize embedding manager.

        Args:
            vocabulary: Term weights and subject keywords (packaged default if None)
            cache_size: Maximum cached vectors; 0 disables caching
        """
        self.vocabulary = vocabulary or SubjectVocabulary.default()
        self.cache_size = max(0, cache_size)

        self._term_weights = list(self.vocabulary.term_weights.items())
        self._subjects = list(self.vocabulary.subjects)
        self._cache: "OrderedDict[str, List[float]]" = OrderedDict()
        self._hits = 0
        self._misses = 0

        logger.info(
            f"EmbeddingManager initialized: dimension={self.dimension} "
            f"cache_size={self.cache_size}"
        )

    @property
    def dimension(self) -> int:
        return len(self._term_weights) + self.STATISTICS_FEATURES + len(self._subjects)

    @property
    def subject_feature_count(self) -> int:
        return len(self._subjects)

    # ==================== Vectors ====================

    def embed(self, text: str) -> List[float]:
        """
        Get the vector for text, using the cache when possible.

        Args:
            text: Chunk or query text

        Returns:
            Feature vector of length ``dimension``
        """
        text = text or ""
        if self.cache_size == 0:
            return self.generate_embedding(text)

        key = hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self._hits += 1
            return list(cached)

        self._misses += 1
        vector = self.generate_embedding(text)
        self._cache[key] = vector
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return list(vector)

    def generate_embedding(self, text: str) -> List[float]:
        """Compute a vector without touching the cache."""
        words = tokenize_words(text)
        total_words = len(words)
        frequencies = Counter(words)

        vector: List[float] = []
        for term, weight in self._term_weights:
            if total_words:
                vector.append(frequencies.get(term, 0) / total_words * weight)
            else:
                vector.append(0.0)

        vector.append(total_words / WORD_COUNT_SCALE)
        vector.append(len(text) / CHAR_COUNT_SCALE)

        vector.extend(self.subject_scores(text).values())
        return vector

    def subject_scores(self, text: str) -> Dict[str, float]:
        """
        Score each subject by keyword occurrences.

        Returns:
            Mapping subject name -> occurrences / keyword-list length,
            in vocabulary order
        """
        lowered = (text or "").lower()
        scores: Dict[str, float] = {}
        for subject in self._subjects:
            hits = sum(count_whole_word(lowered, keyword) for keyword in subject.keywords)
            scores[subject.name] = hits / len(subject.keywords)
        return scores

    # ==================== Similarity ====================

    def similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        """
        Weighted cosine similarity.

        Subject features count double; vectors of different length, or a
        zero vector, give 0.
        """
        if len(a) != len(b) or not a:
            return 0.0

        subject_start = len(a) - self.subject_feature_count
        dot = norm_a = norm_b = 0.0

        for i, (x, y) in enumerate(zip(a, b)):
            weight = SUBJECT_FEATURE_WEIGHT if i >= subject_start else 1.0
            wx = x * weight
            wy = y * weight
            dot += wx * wy
            norm_a += wx * wx
            norm_b += wy * wy

        magnitude = math.sqrt(norm_a) * math.sqrt(norm_b)
        if magnitude == 0:
            return 0.0
        return max(-1.0, min(1.0, dot / magnitude))

    # ==================== Cache ====================

    def clear_cache(self) -> None:
        """Drop every cached vector."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def cache_info(self) -> Dict[str, int]:
        """Cache counters for status reporting."""
        return {
            "size": len(self._cache),
            "max_size": self.cache_size,
            "hits": self._hits,
            "misses": self._misses,
        }
