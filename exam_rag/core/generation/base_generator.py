"""
Base Generator
===============

Abstract base class for answer generators and the client protocol they
call.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Protocol, runtime_checkable

from exam_rag.core.models.entities import ScoredCandidate
from exam_rag.core.models.response import GenerationResult
from exam_rag.utils.text_utils import unique_in_order

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerationClient(Protocol):
    """Hosted text / vision model."""

    async def complete(self, prompt: str) -> str:
        ...

    async def analyze_image(self, image: Any, prompt: str) -> str:
        ...


class BaseGenerator(ABC):
    """
    Abstract base class for answer generators.

    Provides common interface for different generation strategies.
    """

    NO_CONTEXT_TEXT = "No specific documents found for this query."

    def __init__(self, llm: TextGenerationClient):
        """
        Initialize generator with LLM.

        Args:
            llm: Text generation client
        """
        self.llm = llm

    @abstractmethod
    async def generate(
        self,
        ranked_chunks: List[ScoredCandidate],
        question: str
    ) -> GenerationResult:
        """
        Generate an answer based on question and ranked chunks.

        Args:
            ranked_chunks: Reranked candidates (may be empty)
            question: User's question

        Returns:
            GenerationResult with answer text and status
        """
        pass

    async def _invoke_llm(self, prompt: str) -> str:
        """
        Invoke the LLM with a prompt.

        Errors propagate; callers decide how to degrade.
        """
        response = await self.llm.complete(prompt)

        if response is None:
            return ""
        if hasattr(response, "content"):
            return response.content or ""
        return str(response)

    def _format_context(self, ranked_chunks: List[ScoredCandidate]) -> str:
        """Render chunks grouped under subject headings."""
        if not ranked_chunks:
            return self.NO_CONTEXT_TEXT

        by_subject: Dict[str, List[ScoredCandidate]] = {}
        for candidate in ranked_chunks:
            by_subject.setdefault(candidate.subject or "General", []).append(candidate)

        parts: List[str] = []
        for subject, candidates in by_subject.items():
            parts.append(f"**{subject} Documents:**")
            for candidate in candidates:
                title = candidate.title or "Unknown Document"
                relevance = (
                    f" (Relevance: {candidate.rerank_score:.2f})"
                    if candidate.rerank_score is not None else ""
                )
                parts.append(f'Document: "{title}"{relevance}')
                parts.append(candidate.content)
                parts.append("---")

        return "\n\n".join(parts)

    @staticmethod
    def _available_subjects(ranked_chunks: List[ScoredCandidate]) -> List[str]:
        return unique_in_order([candidate.subject for candidate in ranked_chunks])
