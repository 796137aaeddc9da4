"""
Strict Generator
================

Answer generation in strict mode.
Only answers from provided context and rewrites weak LLM output into
fixed fallback messages.
"""

import logging
from typing import List

from exam_rag.core.models.entities import ScoredCandidate
from exam_rag.core.models.response import AnswerStatus, GenerationResult

from . import fallback_messages
from .base_generator import BaseGenerator

logger = logging.getLogger(__name__)


class StrictGenerator(BaseGenerator):
    """
    Strict mode generator that only answers from provided context.

    Never raises: empty answers, answers admitting missing context and
    LLM failures all come back as degraded ``GenerationResult`` objects.
    """

    PROMPT_TEMPLATE = (
        "You are EduBot AI, a helpful educational assistant. Use the provided context "
        "to answer the student's question accurately and educationally.\n\n"
        "**IMPORTANT INSTRUCTIONS:**\n"
        "- ONLY answer based on the provided context from uploaded documents\n"
        "- If the context doesn't contain relevant information for the question, clearly state this\n"
        "- Do NOT use general knowledge if it's not in the provided context\n"
        "- Be specific about which document or subject area your answer comes from\n"
        "- If there's a subject mismatch (e.g., math question but history context), acknowledge this\n\n"
        "Context from documents:\n{context}\n\n"
        "Student question: {question}\n\n"
        "**Response Guidelines:**\n"
        "- Provide clear, educational responses using the context above\n"
        "- Use markdown formatting for better readability\n"
        "- Keep responses concise but informative\n"
        "- If context is insufficient, suggest asking about topics covered in the available documents\n\n"
        "Answer:"
    )

    INSUFFICIENT_CONTEXT_PHRASES = (
        "i don't have enough information",
        "the context doesn't contain",
        "not enough information",
        "cannot answer based on",
        "insufficient information",
        "no relevant information",
    )

    def build_prompt(self, ranked_chunks: List[ScoredCandidate], question: str) -> str:
        """Fill the prompt template with formatted context and the question."""
        return self.PROMPT_TEMPLATE.format(
            context=self._format_context(ranked_chunks),
            question=question,
        )

    async def generate(
        self,
        ranked_chunks: List[ScoredCandidate],
        question: str
    ) -> GenerationResult:
        """
        Generate answer in strict mode.

        Args:
            ranked_chunks: Reranked candidates (may be empty)
            question: User's question

        Returns:
            GenerationResult; status is ``answered`` or ``no_context`` on
            success and one of the degraded statuses otherwise
        """
        subjects = self._available_subjects(ranked_chunks)
        logger.info(
            f"[strict_generator] Generating from {len(ranked_chunks)} chunks"
            f" (subjects: {', '.join(subjects) or 'none'})"
        )

        try:
            answer = (await self._invoke_llm(self.build_prompt(ranked_chunks, question))).strip()
        except Exception as e:
            logger.error(f"[strict_generator] LLM call failed: {e}")
            return GenerationResult(
                answer=fallback_messages.generation_error_message(question, subjects, str(e)),
                status=AnswerStatus.GENERATION_ERROR,
                error=str(e),
            )

        if not answer:
            logger.warning("[strict_generator] Empty answer from LLM")
            return GenerationResult(
                answer=fallback_messages.no_response_message(question, subjects),
                status=AnswerStatus.EMPTY_RESPONSE,
            )

        if self.is_insufficient_context(answer):
            logger.info("[strict_generator] LLM reported insufficient context")
            return GenerationResult(
                answer=fallback_messages.insufficient_context_message(question, subjects),
                status=AnswerStatus.INSUFFICIENT_CONTEXT,
            )

        status = AnswerStatus.ANSWERED if ranked_chunks else AnswerStatus.NO_CONTEXT
        logger.info(f"[strict_generator] status={status.value}, answer_len={len(answer)}")
        return GenerationResult(answer=answer, status=status)

    def is_insufficient_context(self, answer: str) -> bool:
        """Check whether the answer admits that the context was not enough."""
        lowered = answer.lower().replace("’", "'")
        return any(phrase in lowered for phrase in self.INSUFFICIENT_CONTEXT_PHRASES)
