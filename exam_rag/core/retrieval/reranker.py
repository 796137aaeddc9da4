"""
Subject-Aware Reranker
======================

Re-scores retrieval candidates with subject agreement, keyword position,
length and lexical relevance, then drops weak matches.
"""

import logging
from typing import List, Optional, Set

from exam_rag.core.models.entities import ScoredCandidate
from exam_rag.core.processors.subject_detector import SubjectDetector
from exam_rag.utils.text_utils import (
    contains_whole_word,
    count_whole_word,
    sentence_start_pattern,
    tokenize_words,
)

logger = logging.getLogger(__name__)


class SubjectAwareReranker:
    """
    Reranks candidates for one query.

    Scoring starts from the candidate's vector similarity:

    1. subject agreement: +1.0 on a match, x0.3 on a mismatch (only when
       the query has a detected subject)
    2. per query word: title +0.5, subject field +0.3, each content
       occurrence +0.1 and each sentence-start occurrence +0.2 more;
       all matches are whole-word, so "art" does not match "party"
    3. length: x0.6 under 50 characters, +0.1 over 500
    4. +0.5 x relevance, the mean of Jaccard overlap and query coverage

    Candidates under ``min_relevance_threshold`` are dropped; the rest are
    sorted and cut to ``top_n``.
    """

    SUBJECT_MATCH_BONUS = 1.0
    SUBJECT_MISMATCH_FACTOR = 0.3
    TITLE_MATCH_BONUS = 0.5
    SUBJECT_FIELD_BONUS = 0.3
    CONTENT_MATCH_BONUS = 0.1
    SENTENCE_START_BONUS = 0.2
    SHORT_CONTENT_CHARS = 50
    SHORT_CONTENT_FACTOR = 0.6
    LONG_CONTENT_CHARS = 500
    LONG_CONTENT_BONUS = 0.1
    RELEVANCE_WEIGHT = 0.5

    def __init__(
        self,
        top_n: int = 3,
        min_relevance_threshold: float = 0.3,
        subject_detector: Optional[SubjectDetector] = None
    ):
        """
        Initialize the reranker.

        Args:
            top_n: Maximum candidates returned
            min_relevance_threshold: Minimum final score to keep a candidate
            subject_detector: Query subject detection (default vocabulary if None)
        """
        self.top_n = top_n
        self.min_relevance_threshold = min_relevance_threshold
        self.subject_detector = subject_detector or SubjectDetector()

    def update_config(
        self,
        top_n: Optional[int] = None,
        min_relevance_threshold: Optional[float] = None
    ) -> None:
        """Change limits; None keeps the current value."""
        if top_n is not None:
            self.top_n = top_n
        if min_relevance_threshold is not None:
            self.min_relevance_threshold = min_relevance_threshold

    def rerank(self, query: str, candidates: List[ScoredCandidate]) -> List[ScoredCandidate]:
        """
        Rerank candidates by relevance to query.

        Args:
            query: User question
            candidates: Vector store results

        Returns:
            At most ``top_n`` candidates at or above the threshold, best first
        """
        if not candidates:
            return []

        query_words = tokenize_words(query)
        query_subject = self.subject_detector.detect(query)
        logger.info(f"[rerank] Detected query subject: {query_subject}")

        scored = [self._score(candidate, query_words, query_subject) for candidate in candidates]

        relevant = []
        for candidate in scored:
            if candidate.rerank_score >= self.min_relevance_threshold:
                relevant.append(candidate)
            else:
                logger.debug(
                    f"[rerank] Filtered out '{candidate.title}' (score={candidate.rerank_score:.3f})"
                )

        relevant.sort(key=lambda candidate: candidate.rerank_score, reverse=True)
        reranked = relevant[:self.top_n]

        logger.info(
            f"[rerank] {len(candidates)} candidates -> {len(relevant)} relevant -> {len(reranked)} kept"
        )
        return reranked

    def _score(
        self,
        candidate: ScoredCandidate,
        query_words: List[str],
        query_subject: Optional[str]
    ) -> ScoredCandidate:
        """Compute rerank and relevance scores for one candidate."""
        score = candidate.similarity or 0.0

        content = candidate.content.lower()
        title = candidate.title.lower()
        subject = candidate.subject.lower()

        subject_match = bool(query_subject) and query_subject in subject
        if query_subject:
            if subject_match:
                score += self.SUBJECT_MATCH_BONUS
            else:
                score *= self.SUBJECT_MISMATCH_FACTOR

        for word in query_words:
            if contains_whole_word(title, word):
                score += self.TITLE_MATCH_BONUS
            if contains_whole_word(subject, word):
                score += self.SUBJECT_FIELD_BONUS
            score += self.keyword_position_score(content, word)

        if len(candidate.content) < self.SHORT_CONTENT_CHARS:
            score *= self.SHORT_CONTENT_FACTOR
        elif len(candidate.content) > self.LONG_CONTENT_CHARS:
            score += self.LONG_CONTENT_BONUS

        relevance = self.semantic_relevance(query_words, tokenize_words(content))
        score += relevance * self.RELEVANCE_WEIGHT

        return candidate.with_scores(
            rerank_score=score,
            relevance_score=relevance,
            subject_match=subject_match,
        )

    def keyword_position_score(self, content: str, word: str) -> float:
        """Score occurrences of word in content, favouring sentence starts."""
        matches = count_whole_word(content, word)
        if not matches:
            return 0.0
        sentence_starts = len(sentence_start_pattern(word).findall(content))
        return matches * self.CONTENT_MATCH_BONUS + sentence_starts * self.SENTENCE_START_BONUS

    @staticmethod
    def semantic_relevance(query_words: List[str], content_words: List[str]) -> float:
        """Mean of Jaccard similarity and query coverage of two word lists."""
        query_set: Set[str] = set(query_words)
        content_set: Set[str] = set(content_words)
        if not query_set:
            return 0.0

        intersection = query_set & content_set
        union = query_set | content_set
        jaccard = len(intersection) / len(union) if union else 0.0
        coverage = len(intersection) / len(query_set)
        return (jaccard + coverage) / 2
