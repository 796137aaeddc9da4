"""Tests for strict answer generation and its fallbacks."""

import pytest
from langchain_core.documents import Document

from exam_rag.core.exceptions import GenerationError
from exam_rag.core.generation import StrictGenerator
from exam_rag.core.models import AnswerStatus, ScoredCandidate


def _ranked(title: str, subject: str, content: str, score: float) -> ScoredCandidate:
    chunk = Document(page_content=content, metadata={"document_id": title, "title": title, "subject": subject})
    return ScoredCandidate(chunk=chunk, similarity=0.5, rerank_score=score, relevance_score=0.2)


@pytest.fixture
def ranked_chunks():
    return [
        _ranked("Linear Equations", "Mathematics", "Subtract 5 from both sides.", 1.5),
        _ranked("Indus Valley", "History", "Harappan cities were planned.", 0.9),
        _ranked("Quadratics", "Mathematics", "Factor the polynomial.", 0.8),
    ]


class TestContextFormatting:
    """Prompt context built from ranked chunks."""

    def test_groups_by_subject(self, fake_llm, ranked_chunks) -> None:
        """Should list chunks under one heading per subject."""
        prompt = StrictGenerator(fake_llm).build_prompt(ranked_chunks, "How do I solve it?")

        assert prompt.count("**Mathematics Documents:**") == 1
        assert prompt.count("**History Documents:**") == 1
        assert prompt.index("Linear Equations") < prompt.index("Quadratics") < prompt.index("Indus Valley")
        assert 'Document: "Linear Equations" (Relevance: 1.50)' in prompt
        assert "Student question: How do I solve it?" in prompt

    def test_no_chunks(self, fake_llm) -> None:
        """Should say that no documents were found."""
        prompt = StrictGenerator(fake_llm).build_prompt([], "Explain photosynthesis")

        assert "No specific documents found for this query." in prompt


class TestStrictGenerator:
    """Statuses and fallback rewriting."""

    @pytest.mark.asyncio
    async def test_answered(self, fake_llm, ranked_chunks) -> None:
        """Should return the LLM answer with status answered."""
        result = await StrictGenerator(fake_llm).generate(ranked_chunks, "How do I solve it?")

        assert result.status is AnswerStatus.ANSWERED
        assert result.answer == fake_llm.answer
        assert not result.is_degraded
        assert len(fake_llm.prompts) == 1

    @pytest.mark.asyncio
    async def test_no_context(self, fake_llm) -> None:
        """Should mark answers generated without documents."""
        result = await StrictGenerator(fake_llm).generate([], "Explain photosynthesis")

        assert result.status is AnswerStatus.NO_CONTEXT
        assert result.is_degraded

    @pytest.mark.asyncio
    async def test_empty_response(self, llm_factory, ranked_chunks) -> None:
        """Should replace an empty answer with a message listing subjects."""
        result = await StrictGenerator(llm_factory(answer="   ")).generate(ranked_chunks, "Question?")

        assert result.status is AnswerStatus.EMPTY_RESPONSE
        assert "• Mathematics" in result.answer
        assert "• History" in result.answer

    @pytest.mark.asyncio
    async def test_insufficient_context(self, llm_factory, ranked_chunks) -> None:
        """Should rewrite answers that admit missing context."""
        llm = llm_factory(answer="Sorry, I don't have enough information to answer that.")

        result = await StrictGenerator(llm).generate(ranked_chunks, "Who won the war?")

        assert result.status is AnswerStatus.INSUFFICIENT_CONTEXT
        assert result.answer.startswith("I don't have sufficient information")
        assert "Mathematics, History" in result.answer

    @pytest.mark.asyncio
    async def test_insufficient_context_without_subjects(self, llm_factory) -> None:
        """Should suggest uploading materials when no subjects are known."""
        llm = llm_factory(answer="There is insufficient information in the context.")

        result = await StrictGenerator(llm).generate([], "Who won the war?")

        assert result.status is AnswerStatus.INSUFFICIENT_CONTEXT
        assert "upload relevant study materials" in result.answer

    @pytest.mark.asyncio
    async def test_llm_error(self, llm_factory, ranked_chunks) -> None:
        """Should turn LLM errors into an error message instead of raising."""
        llm = llm_factory(error=GenerationError("Ollama request timeout"))

        result = await StrictGenerator(llm).generate(ranked_chunks, "Question?")

        assert result.status is AnswerStatus.GENERATION_ERROR
        assert "Ollama request timeout" in result.answer
        assert "Mathematics, History" in result.answer
        assert result.error == "Ollama request timeout"

    @pytest.mark.parametrize("answer", [
        "The context doesn't contain anything about Rome.",
        "I cannot answer based on these notes.",
        "There is no relevant information here.",
    ])
    def test_insufficient_phrases(self, fake_llm, answer) -> None:
        """Should recognise the insufficient-context phrasings."""
        assert StrictGenerator(fake_llm).is_insufficient_context(answer)

    def test_regular_answer_not_insufficient(self, fake_llm) -> None:
        """Should not flag ordinary answers."""
        assert not StrictGenerator(fake_llm).is_insufficient_context("x equals 5.")
