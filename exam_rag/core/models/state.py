"""
Graph and Pipeline State
========================

TypedDict state for the LangGraph query graph and the corpus lifecycle
state kept by each pipeline instance.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from .entities import ScoredCandidate
from .response import AnswerStatus


class GraphState(TypedDict, total=False):
    """
    State object passed through the query graph.

    Attributes:
        question: The user's question
        documents: Optional caller-supplied corpus snapshot
        corpus_size: Number of indexed chunks after the freshness check
        retrieved: Candidates from the vector store
        reranked: Candidates that survived reranking
        answer: Final answer text
        status: How the answer was produced
        error: Error description for degraded answers
    """
    question: str
    documents: Optional[List[Any]]
    corpus_size: int
    retrieved: List[ScoredCandidate]
    reranked: List[ScoredCandidate]
    answer: str
    status: AnswerStatus
    error: Optional[str]


class PipelineStatus(str, Enum):
    """Corpus lifecycle of a pipeline."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class PipelineState:
    """Per-instance corpus bookkeeping."""
    status: PipelineStatus = PipelineStatus.UNINITIALIZED
    last_document_load_time: Optional[datetime] = None
    last_document_hash: Optional[str] = None
    document_subjects: Dict[str, str] = field(default_factory=dict)

    @property
    def is_initialized(self) -> bool:
        return self.status is PipelineStatus.READY

    def reset(self) -> None:
        """Forget the loaded corpus so the next initialize rebuilds."""
        self.status = PipelineStatus.UNINITIALIZED
        self.last_document_hash = None
        self.document_subjects.clear()
