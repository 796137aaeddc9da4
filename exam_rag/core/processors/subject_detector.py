"""
Subject Detector
================

Rule-based detection of the subject a question is about.
"""

import logging
from typing import Dict, Optional

from exam_rag.indexing.ingestor.vocabulary import SubjectVocabulary
from exam_rag.utils.text_utils import contains_whole_word

logger = logging.getLogger(__name__)


class SubjectDetector:
    """
    Picks the dominant subject of a query from keyword overlap.

    Each subject keyword present in the query (whole word, any case) adds
    one point. The highest score wins; ties go to the subject listed first
    in the vocabulary; no hits means no subject.
    """

    def __init__(self, vocabulary: Optional[SubjectVocabulary] = None):
        self.vocabulary = vocabulary or SubjectVocabulary.default()

    def score_subjects(self, query: str) -> Dict[str, int]:
        """Keyword hits per subject, in vocabulary order."""
        lowered = (query or "").lower()
        return {
            subject.name: sum(1 for keyword in subject.keywords if contains_whole_word(lowered, keyword))
            for subject in self.vocabulary.subjects
        }

    def detect(self, query: str) -> Optional[str]:
        """
        Detect the query's subject.

        Args:
            query: User question

        Returns:
            Subject name, or None when no keyword matched
        """
        best_subject = None
        best_score = 0
        for subject, score in self.score_subjects(query).items():
            if score > best_score:
                best_subject = subject
                best_score = score

        logger.debug(f"[subject_detector] subject={best_subject} score={best_score}")
        return best_subject
