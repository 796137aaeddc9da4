"""
RAG Service
===========

Course-document RAG pipeline: corpus lifecycle plus a LangGraph query
graph tying retrieval, reranking and generation together.
"""

import dataclasses
import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from langgraph.graph import END, StateGraph

from exam_rag.config.settings import RAGConfig
from exam_rag.core.generation import fallback_messages
from exam_rag.core.generation.base_generator import TextGenerationClient
from exam_rag.core.generation.strict_generator import StrictGenerator
from exam_rag.core.models.response import AnswerStatus, RAGResponse
from exam_rag.core.models.state import GraphState, PipelineState, PipelineStatus
from exam_rag.core.processors.subject_detector import SubjectDetector
from exam_rag.core.retrieval.reranker import SubjectAwareReranker
from exam_rag.core.retrieval.vector_store import InMemoryVectorStore
from exam_rag.indexing.chunker.chunker import DocumentProcessor
from exam_rag.indexing.ingestor.embeddings import EmbeddingManager
from exam_rag.indexing.ingestor.metadata_utils import corpus_hash, normalize_documents
from exam_rag.indexing.ingestor.vocabulary import SubjectVocabulary, load_vocabulary
from exam_rag.utils.text_utils import truncate_text, unique_in_order

from .document_source import DocumentSource, StaticDocumentSource
from .ollama_service import DEFAULT_IMAGE_PROMPT

logger = logging.getLogger(__name__)

CHUNK_SETTINGS = ("chunk_size", "chunk_overlap")
EMBEDDING_SETTINGS = ("embedding_cache_size", "vocabulary_path")


class RAGPipeline:
    """
    Retrieval-augmented answering over uploaded course documents.

    Query flow:
    1. Ensure the corpus is loaded and fresh
    2. Vector search over chunk embeddings
    3. Subject-aware reranking with a relevance threshold
    4. Strict generation from the surviving chunks

    Empty corpora and empty retrievals go straight to generation without
    context; a retrieval with nothing relevant returns a fixed message
    naming the subjects that were found. ``query`` never raises.
    """

    def __init__(
        self,
        llm: TextGenerationClient,
        document_source: Optional[DocumentSource] = None,
        config: Optional[RAGConfig] = None,
        vocabulary: Optional[SubjectVocabulary] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the pipeline.

        Args:
            llm: Text (and vision) generation client
            document_source: Where documents come from when none are passed in
            config: RAG parameters (defaults if None)
            vocabulary: Subject vocabulary (loaded from config.vocabulary_path if None)
            clock: Time source for staleness checks
        """
        self.config = config or RAGConfig()
        self.config.validate()

        self.llm = llm
        self.document_source = document_source or StaticDocumentSource()
        self.clock = clock
        self.state = PipelineState()

        self._init_components(vocabulary)

        # Build LangGraph
        self.app = self._build_graph()

        # Statistics tracking
        self.stats: Dict[str, Any] = {
            "total_queries": 0,
            "successful_queries": 0,
            "failed_queries": 0,
            "average_response_time": 0.0,
            "status_counts": {status.value: 0 for status in AnswerStatus},
            "index_builds": 0,
        }

        logger.info("RAGPipeline initialized successfully")

    def _init_components(self, vocabulary: Optional[SubjectVocabulary] = None) -> None:
        """Initialize all pipeline components."""
        self.vocabulary = vocabulary or load_vocabulary(self.config.vocabulary_path)

        self.processor = DocumentProcessor(
            chunk_size=self.config.chunk_size,
            chunk_overlap=self.config.chunk_overlap,
        )
        self._init_retrieval()
        self.generator = StrictGenerator(self.llm)

    def _init_retrieval(self) -> None:
        """Components that depend on the vocabulary."""
        self.embedding_manager = EmbeddingManager(
            vocabulary=self.vocabulary,
            cache_size=self.config.embedding_cache_size,
        )
        self.vector_store = InMemoryVectorStore(self.embedding_manager)
        self.reranker = SubjectAwareReranker(
            top_n=self.config.reranker_top_n,
            min_relevance_threshold=self.config.min_relevance_threshold,
            subject_detector=SubjectDetector(self.vocabulary),
        )

    def _build_graph(self) -> Any:
        """Build the LangGraph query pipeline."""
        graph = StateGraph(GraphState)

        # Add nodes
        graph.add_node("ensure_corpus", self._ensure_corpus)
        graph.add_node("retrieve", self._retrieve)
        graph.add_node("rerank", self._rerank)
        graph.add_node("generate", self._generate)
        graph.add_node("generate_without_context", self._generate_without_context)
        graph.add_node("no_relevant_documents", self._no_relevant_documents)

        graph.set_entry_point("ensure_corpus")

        # Conditional routing
        def route_corpus(state: GraphState) -> str:
            return "retrieve" if state.get("corpus_size") else "generate_without_context"

        def route_retrieval(state: GraphState) -> str:
            return "rerank" if state.get("retrieved") else "generate_without_context"

        def route_rerank(state: GraphState) -> str:
            return "generate" if state.get("reranked") else "no_relevant_documents"

        graph.add_conditional_edges(
            "ensure_corpus",
            route_corpus,
            {"retrieve": "retrieve", "generate_without_context": "generate_without_context"}
        )
        graph.add_conditional_edges(
            "retrieve",
            route_retrieval,
            {"rerank": "rerank", "generate_without_context": "generate_without_context"}
        )
        graph.add_conditional_edges(
            "rerank",
            route_rerank,
            {"generate": "generate", "no_relevant_documents": "no_relevant_documents"}
        )
        graph.add_edge("generate", END)
        graph.add_edge("generate_without_context", END)
        graph.add_edge("no_relevant_documents", END)

        return graph.compile()

    # ==================== Graph Nodes ====================

    async def _ensure_corpus(self, state: GraphState) -> Dict[str, Any]:
        """Node: Load or refresh the corpus when needed."""
        documents = state.get("documents")

        if self.should_reinitialize(documents):
            await self.initialize(documents, force=self._is_stale())

        corpus_size = self.vector_store.get_document_count()
        if not corpus_size:
            logger.info("[ensure_corpus] No documents in vector store, answering without context")
        return {"corpus_size": corpus_size}

    async def _retrieve(self, state: GraphState) -> Dict[str, Any]:
        """Node: Vector search."""
        retrieved = self.vector_store.search(state["question"], self.config.retrieval_top_k)

        for position, candidate in enumerate(retrieved, start=1):
            logger.debug(
                f"[retrieve] {position}: '{candidate.title}' ({candidate.subject}) "
                f"similarity={candidate.similarity:.3f}"
            )
        if not retrieved:
            logger.info("[retrieve] No candidates, answering without context")
        return {"retrieved": retrieved}

    async def _rerank(self, state: GraphState) -> Dict[str, Any]:
        """Node: Subject-aware reranking."""
        reranked = self.reranker.rerank(state["question"], state.get("retrieved", []))

        for position, candidate in enumerate(reranked, start=1):
            logger.info(
                f"[rerank] Final {position}: '{candidate.title}' ({candidate.subject}) "
                f"score={candidate.rerank_score:.3f}"
            )
        return {"reranked": reranked}

    async def _generate(self, state: GraphState) -> Dict[str, Any]:
        """Node: Generate from the reranked chunks."""
        result = await self.generator.generate(state.get("reranked", []), state["question"])
        return {"answer": result.answer, "status": result.status, "error": result.error}

    async def _generate_without_context(self, state: GraphState) -> Dict[str, Any]:
        """Node: Generate with no documents in the prompt."""
        result = await self.generator.generate([], state["question"])
        return {"answer": result.answer, "status": result.status, "error": result.error}

    async def _no_relevant_documents(self, state: GraphState) -> Dict[str, Any]:
        """Node: Nothing passed the reranker; list what was found instead."""
        subjects = unique_in_order([candidate.subject for candidate in state.get("retrieved", [])])
        logger.info("[no_relevant_documents] No sufficiently relevant documents after reranking")
        return {
            "answer": fallback_messages.no_relevant_documents_message(state["question"], subjects),
            "status": AnswerStatus.NO_RELEVANT_DOCUMENTS,
        }

    # ==================== Corpus Lifecycle ====================

    async def initialize(
        self,
        documents: Optional[Sequence[Any]] = None,
        force: bool = False
    ) -> bool:
        """
        Load a corpus snapshot into the index.

        Args:
            documents: Document rows; fetched from the document source if None
            force: Rebuild even when the corpus is unchanged

        Returns:
            True when the index was rebuilt

        Raises:
            DocumentSourceError: The document source failed; state is unchanged
        """
        if documents is None:
            documents = await self.document_source.list_documents()

        valid, _ = normalize_documents(documents)
        current_hash = corpus_hash(valid)

        if not force and self.state.is_initialized and current_hash == self.state.last_document_hash:
            logger.info("[initialize] Documents unchanged, skipping reprocessing")
            return False

        if not valid:
            logger.warning("[initialize] No documents available for RAG pipeline")

        previous_status = self.state.status
        self.state.status = PipelineStatus.INITIALIZING
        try:
            chunks = self.processor.chunk(valid)
            chunk_count = self.vector_store.replace(chunks)
        except Exception:
            self.state.status = previous_status
            raise

        self.state.status = PipelineStatus.READY
        self.state.last_document_load_time = self.clock()
        self.state.last_document_hash = current_hash
        self.state.document_subjects = {doc.id: doc.subject or "General" for doc in valid}
        self.stats["index_builds"] += 1

        logger.info(
            f"[initialize] Indexed {len(valid)} documents ({chunk_count} chunks), "
            f"subjects={self.available_subjects()}"
        )
        return True

    async def reinitialize(self, documents: Optional[Sequence[Any]] = None) -> bool:
        """Forget the loaded corpus and rebuild unconditionally."""
        logger.info("[initialize] Forcing reinitialization")
        self.state.reset()
        return await self.initialize(documents, force=True)

    def should_reinitialize(self, documents: Optional[Sequence[Any]] = None) -> bool:
        """
        Check whether the next query has to (re)build the index.

        True when the pipeline is not ready, its stored hash was invalidated,
        the supplied documents differ from the loaded ones, or the loaded
        corpus is older than the staleness window.
        """
        if not self.state.is_initialized or self.state.last_document_hash is None:
            return True

        if documents is not None:
            valid, _ = normalize_documents(documents)
            if corpus_hash(valid) != self.state.last_document_hash:
                logger.info("[initialize] Document changes detected, reinitialization needed")
                return True

        if self._is_stale():
            logger.info(
                f"[initialize] {self.config.staleness_minutes:g} minutes elapsed, reinitialization needed"
            )
            return True

        return False

    def _is_stale(self) -> bool:
        loaded_at = self.state.last_document_load_time
        if loaded_at is None:
            return False
        return self.clock() - loaded_at >= timedelta(minutes=self.config.staleness_minutes)

    def available_subjects(self) -> List[str]:
        """Subjects of the loaded documents, first-seen order."""
        return unique_in_order(list(self.state.document_subjects.values()))

    # ==================== Public API ====================

    async def query(
        self,
        question: str,
        documents: Optional[Sequence[Any]] = None
    ) -> RAGResponse:
        """
        Answer a question from the course documents.

        Args:
            question: User's question
            documents: Optional corpus snapshot; replaces the loaded corpus if it differs

        Returns:
            RAGResponse; degraded answers carry a non-``answered`` status
        """
        start_time = time.time()
        logger.info(f"[query] Question: {truncate_text(question or '', 100)}")

        try:
            init_state: GraphState = {
                "question": question,
                "documents": documents,
            }

            # Run the graph
            final_state = await self.app.ainvoke(init_state)

            status = final_state["status"]
            retrieved = final_state.get("retrieved") or []
            reranked = final_state.get("reranked") or []
            processing_time = time.time() - start_time

            response = RAGResponse(
                query=question,
                response=final_state.get("answer", ""),
                source_documents=[candidate.to_source() for candidate in reranked],
                status=status,
                processing_time=processing_time,
                error=final_state.get("error"),
                metadata={
                    "corpus_size": final_state.get("corpus_size", 0),
                    "documents_retrieved": len(retrieved),
                    "documents_reranked": len(reranked),
                },
            )

            logger.info(
                f"[query] status={status.value} sources="
                f"{[f'{source.title} ({source.subject})' for source in response.source_documents]}"
            )

        except Exception as e:
            logger.exception("Error processing query")
            processing_time = time.time() - start_time
            response = RAGResponse.error_response(
                query=question,
                error=str(e),
                response=fallback_messages.pipeline_error_message(question, str(e)),
                processing_time=processing_time,
            )

        self._record(response)
        return response

    async def query_with_image(
        self,
        question: str,
        image: Any,
        documents: Optional[Sequence[Any]] = None
    ) -> RAGResponse:
        """
        Answer a question about an image.

        The image is described by the vision model, the description is
        appended to the question and the result goes through ``query``.
        """
        start_time = time.time()

        try:
            analysis = (await self.llm.analyze_image(image, DEFAULT_IMAGE_PROMPT) or "").strip()
        except Exception as e:
            logger.exception("Error analysing image")
            response = RAGResponse(
                query=question,
                response=fallback_messages.image_error_message(str(e)),
                source_documents=[],
                status=AnswerStatus.GENERATION_ERROR,
                processing_time=time.time() - start_time,
                error=str(e),
            )
            self._record(response)
            return response

        logger.info(f"[query] Image analysis: {truncate_text(analysis, 100)}")
        combined = f"{question}\n\nImage content:\n{analysis}" if analysis else question

        response = await self.query(combined, documents)
        response.query = question
        response.image_analysis = analysis
        response.processing_time = time.time() - start_time
        return response

    def _record(self, response: RAGResponse) -> None:
        """Update query statistics."""
        self.stats["total_queries"] += 1
        self.stats["status_counts"][response.status.value] += 1

        if response.status is AnswerStatus.PIPELINE_ERROR:
            self.stats["failed_queries"] += 1
            return

        self.stats["successful_queries"] += 1
        self._update_average_response_time(response.processing_time)

    def _update_average_response_time(self, new_time: float) -> None:
        """Update average response time statistics."""
        current = self.stats["average_response_time"]
        n = self.stats["successful_queries"]
        if n <= 1:
            self.stats["average_response_time"] = new_time
        else:
            self.stats["average_response_time"] = (current * (n - 1) + new_time) / n

    def get_status(self) -> Dict[str, Any]:
        """Get pipeline status."""
        loaded_at = self.state.last_document_load_time
        return {
            "state": self.state.status.value,
            "is_initialized": self.state.is_initialized,
            "document_count": self.vector_store.get_document_count(),
            "last_document_load_time": loaded_at.isoformat() if loaded_at else None,
            "last_document_hash": self.state.last_document_hash,
            "config": self.config.to_dict(),
            "available_subjects": self.available_subjects(),
            "indexed_subjects": self.vector_store.subjects(),
        }

    def update_config(self, **changes: Any) -> RAGConfig:
        """
        Merge configuration changes and push them to the components.

        Chunk setting changes invalidate the stored corpus hash, vocabulary
        or cache changes rebuild the retrieval components; either way the
        next query rebuilds the index.

        Raises:
            ValueError: Unknown configuration keys
            ConfigurationError: Invalid values (configuration is left unchanged)
        """
        unknown = set(changes) - RAGConfig.field_names()
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        new_config = dataclasses.replace(self.config, **changes)
        new_config.validate()

        previous = self.config
        vocabulary = self.vocabulary
        if new_config.vocabulary_path != previous.vocabulary_path:
            vocabulary = load_vocabulary(new_config.vocabulary_path)

        self.config = new_config
        self.vocabulary = vocabulary

        if any(getattr(previous, name) != getattr(new_config, name) for name in EMBEDDING_SETTINGS):
            self._init_retrieval()
            self.state.reset()
            logger.info("[config] Retrieval components rebuilt")
        else:
            self.reranker.update_config(
                top_n=new_config.reranker_top_n,
                min_relevance_threshold=new_config.min_relevance_threshold,
            )

        if any(getattr(previous, name) != getattr(new_config, name) for name in CHUNK_SETTINGS):
            self.processor.configure(new_config.chunk_size, new_config.chunk_overlap)
            self.state.last_document_hash = None
            logger.info("[config] Chunk settings changed, index will be rebuilt")

        logger.info("[config] RAG pipeline configuration updated")
        return self.config

    def get_statistics(self) -> Dict[str, Any]:
        """Get system statistics."""
        total = max(1, self.stats["total_queries"])
        return {
            **self.stats,
            "status_counts": dict(self.stats["status_counts"]),
            "success_rate": (self.stats["successful_queries"] / total) * 100.0,
            "document_count": self.vector_store.get_document_count(),
            "embedding_cache": self.embedding_manager.cache_info(),
            "timestamp": datetime.now().isoformat(),
        }

    def health_check(self) -> Dict[str, Any]:
        """Perform system health check."""
        components = {
            "vector_store": "available",
            "index": "ready" if self.state.is_initialized else self.state.status.value,
        }

        check_llm = getattr(self.llm, "health_check", None)
        if callable(check_llm):
            try:
                llm_health = check_llm()
                components["llm"] = "available" if llm_health.get("reachable") else "unavailable"
            except Exception as e:
                logger.warning(f"LLM health check failed: {e}")
                components["llm"] = "unavailable"
        else:
            components["llm"] = "unknown"

        return {
            "status": "healthy" if components["llm"] != "unavailable" else "degraded",
            "components": components,
            "document_count": self.vector_store.get_document_count(),
            "timestamp": datetime.now().isoformat(),
        }
