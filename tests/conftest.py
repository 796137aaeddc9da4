"""
Shared test fixtures for the exam assistant RAG suite.

Provides: sample course documents, fake text/vision clients, a controllable
clock and ready-made pipelines.
"""

from datetime import datetime, timedelta
from typing import Any, List, Optional

import pytest

from exam_rag.config.settings import RAGConfig
from exam_rag.services.document_source import StaticDocumentSource
from exam_rag.services.rag_service import RAGPipeline

MATH_CONTENT = (
    "Solve for x: 2x + 5 = 15. Subtract 5 from both sides to get 2x = 10, "
    "then divide both sides by 2, so x = 5. This linear equation has one variable."
)

HISTORY_CONTENT = (
    "Harappan civilization flourished in Indus Valley around 2500 BCE. Its planned cities, "
    "bronze tools, pottery and long distance trade reveal an advanced ancient society."
)


class FakeLLM:
    """Records prompts and returns canned answers."""

    def __init__(
        self,
        answer: str = "x = 5, found by isolating x in the Linear Equations notes.",
        image_description: str = "A worksheet asking to solve 2x + 5 = 15.",
        error: Optional[Exception] = None,
        image_error: Optional[Exception] = None,
    ):
        self.answer = answer
        self.image_description = image_description
        self.error = error
        self.image_error = image_error
        self.prompts: List[str] = []
        self.images: List[Any] = []
        self.image_prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.answer

    async def analyze_image(self, image: Any, prompt: str) -> str:
        self.images.append(image)
        self.image_prompts.append(prompt)
        if self.image_error:
            raise self.image_error
        return self.image_description


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 9, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def math_document():
    return {
        "id": "doc-math",
        "title": "Linear Equations",
        "subject": "Mathematics",
        "content": MATH_CONTENT,
        "created_at": "2024-09-01T08:00:00Z",
    }


@pytest.fixture
def history_document():
    return {
        "id": "doc-history",
        "title": "Indus Valley Civilization",
        "subject": "History",
        "content": HISTORY_CONTENT,
        "created_at": "2024-09-01T08:05:00Z",
    }


@pytest.fixture
def sample_documents(math_document, history_document):
    return [math_document, history_document]


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def pipeline(fake_llm, sample_documents, fake_clock):
    """Pipeline over the sample corpus with a fake LLM."""
    return RAGPipeline(
        llm=fake_llm,
        document_source=StaticDocumentSource(sample_documents),
        config=RAGConfig(),
        clock=fake_clock,
    )


@pytest.fixture
def llm_factory():
    """Build FakeLLM instances with custom behaviour."""
    return FakeLLM
