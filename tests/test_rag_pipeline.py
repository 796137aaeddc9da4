"""Tests for the RAG pipeline: corpus lifecycle, query graph and fallbacks."""

import json

import pytest

from exam_rag.config.settings import RAGConfig
from exam_rag.core.exceptions import ConfigurationError, DocumentSourceError, GenerationError
from exam_rag.core.models import AnswerStatus, PipelineStatus
from exam_rag.services.document_source import StaticDocumentSource
from exam_rag.services.ollama_service import DEFAULT_IMAGE_PROMPT
from exam_rag.services.rag_service import RAGPipeline


class FailingSource:
    """Document source that is always down."""

    async def list_documents(self):
        raise DocumentSourceError("database unreachable", source="test")


class TestQueryScenarios:
    """End-to-end answers over the sample corpus."""

    @pytest.mark.asyncio
    async def test_exact_subject_match(self, pipeline, fake_llm) -> None:
        """Should answer a maths question from the Mathematics chunk only."""
        response = await pipeline.query("How do I solve 2x+5=15 for x?")

        assert response.status is AnswerStatus.ANSWERED
        assert response.response == fake_llm.answer
        assert len(response.source_documents) == 1
        top = response.source_documents[0]
        assert top.subject == "Mathematics"
        assert top.subject_match is True
        assert top.id == "doc-math"
        assert "**Mathematics Documents:**" in fake_llm.prompts[0]
        assert "History Documents" not in fake_llm.prompts[0]

    @pytest.mark.asyncio
    async def test_irrelevant_query(self, pipeline, fake_llm) -> None:
        """Should return the nothing-relevant fallback without calling the LLM."""
        response = await pipeline.query("What is the capital of France?")

        assert response.status is AnswerStatus.NO_RELEVANT_DOCUMENTS
        assert response.source_documents == []
        assert response.response.startswith("I couldn't find documents that are sufficiently relevant")
        assert "• Mathematics" in response.response
        assert "• History" in response.response
        assert fake_llm.prompts == []

    @pytest.mark.asyncio
    async def test_empty_document_set(self, pipeline, fake_llm) -> None:
        """Should answer without context for an empty corpus."""
        response = await pipeline.query("Explain photosynthesis", [])

        assert response.response
        assert response.source_documents == []
        assert response.status is AnswerStatus.NO_CONTEXT
        assert "No specific documents found for this query." in fake_llm.prompts[0]
        assert pipeline.get_status()["document_count"] == 0

    @pytest.mark.asyncio
    async def test_generation_throws(self, llm_factory, sample_documents) -> None:
        """Should return the error fallback when the LLM raises."""
        llm = llm_factory(error=GenerationError("model crashed"))
        pipeline = RAGPipeline(llm=llm)

        response = await pipeline.query("How do I solve 2x+5=15 for x?", sample_documents)

        assert response.status is AnswerStatus.GENERATION_ERROR
        assert "model crashed" in response.response
        assert response.error == "model crashed"

    @pytest.mark.asyncio
    async def test_document_source_failure(self, fake_llm) -> None:
        """Should convert a failing document source into a pipeline error response."""
        pipeline = RAGPipeline(llm=fake_llm, document_source=FailingSource())

        response = await pipeline.query("How do I solve 2x+5=15 for x?")

        assert response.status is AnswerStatus.PIPELINE_ERROR
        assert response.source_documents == []
        assert "database unreachable" in response.response
        assert pipeline.get_statistics()["failed_queries"] == 1

    @pytest.mark.asyncio
    async def test_response_serialization(self, pipeline) -> None:
        """Should serialise to a JSON-ready dictionary."""
        data = (await pipeline.query("How do I solve 2x+5=15 for x?")).to_dict()

        assert data["status"] == "answered"
        assert data["degraded"] is False
        assert data["source_documents"][0]["subject_match"] is True
        assert data["metadata"]["documents_reranked"] == 1


class TestImageQueries:
    """Questions about images."""

    @pytest.mark.asyncio
    async def test_image_analysis_appended(self, pipeline, fake_llm) -> None:
        """Should add the image description to the question and report it."""
        response = await pipeline.query_with_image("Can you help with this?", b"image-bytes")

        assert fake_llm.images == [b"image-bytes"]
        assert fake_llm.image_prompts == [DEFAULT_IMAGE_PROMPT]
        assert response.query == "Can you help with this?"
        assert response.image_analysis == fake_llm.image_description
        assert fake_llm.image_description in fake_llm.prompts[0]
        assert response.source_documents[0].subject == "Mathematics"

    @pytest.mark.asyncio
    async def test_image_failure(self, llm_factory, sample_documents) -> None:
        """Should return a fallback when the image cannot be analysed."""
        llm = llm_factory(image_error=GenerationError("Unsupported image format: image/bmp"))
        pipeline = RAGPipeline(llm=llm, document_source=StaticDocumentSource(sample_documents))

        response = await pipeline.query_with_image("What is this?", b"BM")

        assert response.status is AnswerStatus.GENERATION_ERROR
        assert "image/bmp" in response.response
        assert llm.prompts == []


class TestCorpusLifecycle:
    """Initialisation, change detection and staleness."""

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, pipeline, sample_documents) -> None:
        """Should rebuild only once for the same documents."""
        assert await pipeline.initialize(sample_documents) is True
        assert await pipeline.initialize(sample_documents) is False
        assert pipeline.stats["index_builds"] == 1

    @pytest.mark.asyncio
    async def test_reinitialize_always_rebuilds(self, pipeline, sample_documents) -> None:
        """Should rebuild on every reinitialize."""
        await pipeline.initialize(sample_documents)

        assert await pipeline.reinitialize(sample_documents) is True
        assert await pipeline.reinitialize(sample_documents) is True
        assert pipeline.stats["index_builds"] == 3

    @pytest.mark.asyncio
    async def test_initialize_from_source(self, pipeline) -> None:
        """Should fetch documents from the source when none are given."""
        await pipeline.initialize()

        status = pipeline.get_status()
        assert status["state"] == "ready"
        assert status["is_initialized"] is True
        assert status["document_count"] == 2
        assert status["available_subjects"] == ["Mathematics", "History"]
        assert status["indexed_subjects"] == ["Mathematics", "History"]
        assert status["last_document_hash"]
        assert status["last_document_load_time"] == "2024-09-01T09:00:00"

    @pytest.mark.asyncio
    async def test_source_error_leaves_state(self, fake_llm) -> None:
        """Should propagate source errors from initialize without changing state."""
        pipeline = RAGPipeline(llm=fake_llm, document_source=FailingSource())

        with pytest.raises(DocumentSourceError):
            await pipeline.initialize()
        assert pipeline.state.status is PipelineStatus.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_content_change_detected(self, pipeline, sample_documents, math_document) -> None:
        """Should notice edited content even when metadata is unchanged."""
        await pipeline.initialize(sample_documents)
        edited = [dict(math_document, content=math_document["content"] + " Check: 2*5+5 = 15."),
                  sample_documents[1]]

        assert pipeline.should_reinitialize(sample_documents) is False
        assert pipeline.should_reinitialize(edited) is True

    @pytest.mark.asyncio
    async def test_staleness_forces_rebuild(self, pipeline, fake_clock) -> None:
        """Should rebuild after the staleness window even if nothing changed."""
        await pipeline.initialize()
        fake_clock.advance(29)
        assert pipeline.should_reinitialize() is False

        fake_clock.advance(2)
        assert pipeline.should_reinitialize() is True

        await pipeline.query("How do I solve 2x+5=15 for x?")
        assert pipeline.stats["index_builds"] == 2
        assert pipeline.should_reinitialize() is False

    @pytest.mark.asyncio
    async def test_query_initializes_once(self, pipeline) -> None:
        """Should load the corpus on the first query and reuse it afterwards."""
        await pipeline.query("How do I solve 2x+5=15 for x?")
        await pipeline.query("What is the capital of France?")

        assert pipeline.stats["index_builds"] == 1

    @pytest.mark.asyncio
    async def test_supplied_documents_replace_corpus(self, pipeline, history_document) -> None:
        """Should rebuild when a query brings a different document set."""
        await pipeline.initialize()

        response = await pipeline.query("How do I solve 2x+5=15 for x?", [history_document])

        assert pipeline.get_status()["available_subjects"] == ["History"]
        assert all(source.subject != "Mathematics" for source in response.source_documents)


class TestConfiguration:
    """Runtime configuration updates."""

    def test_unknown_key(self, pipeline) -> None:
        """Should reject unknown configuration keys."""
        with pytest.raises(ValueError):
            pipeline.update_config(temperature=0.1)

    def test_invalid_value_keeps_config(self, pipeline) -> None:
        """Should reject invalid values and keep the old configuration."""
        with pytest.raises(ConfigurationError):
            pipeline.update_config(reranker_top_n=0)
        assert pipeline.config.reranker_top_n == 3

    def test_unreadable_vocabulary_keeps_config(self, pipeline, tmp_path) -> None:
        """Should keep the old configuration and vocabulary when the new file cannot be loaded."""
        vocabulary = pipeline.vocabulary
        embedding_manager = pipeline.embedding_manager

        with pytest.raises(ConfigurationError):
            pipeline.update_config(vocabulary_path=str(tmp_path / "missing.json"))

        assert pipeline.config.vocabulary_path is None
        assert pipeline.get_status()["config"]["vocabulary_path"] is None
        assert pipeline.vocabulary is vocabulary
        assert pipeline.embedding_manager is embedding_manager

    def test_custom_vocabulary_applied(self, pipeline, tmp_path) -> None:
        """Should rebuild retrieval on a readable vocabulary file."""
        path = tmp_path / "vocabulary.json"
        path.write_text(
            json.dumps({"subjects": [{"name": "music", "term_weights": {"melody": 2.0}, "keywords": ["melody"]}]}),
            encoding="utf-8",
        )

        pipeline.update_config(vocabulary_path=str(path))

        assert pipeline.config.vocabulary_path == str(path)
        assert pipeline.vocabulary.subject_names == ["music"]
        assert pipeline.embedding_manager.vocabulary is pipeline.vocabulary
        assert pipeline.should_reinitialize() is True

    def test_reranker_settings_pushed(self, pipeline) -> None:
        """Should apply reranker limits immediately."""
        pipeline.update_config(reranker_top_n=1, min_relevance_threshold=0.5)

        assert pipeline.reranker.top_n == 1
        assert pipeline.reranker.min_relevance_threshold == 0.5
        assert pipeline.get_status()["config"]["reranker_top_n"] == 1

    @pytest.mark.asyncio
    async def test_chunk_settings_trigger_rebuild(self, pipeline) -> None:
        """Should rebuild the index with new chunk settings on the next query."""
        await pipeline.initialize()
        pipeline.update_config(chunk_size=60, chunk_overlap=10)

        assert pipeline.processor.chunk_size == 60
        assert pipeline.should_reinitialize() is True

        await pipeline.query("How do I solve 2x+5=15 for x?")
        assert pipeline.get_status()["document_count"] > 2

    def test_invalid_config_at_construction(self, fake_llm) -> None:
        """Should refuse to build a pipeline with invalid settings."""
        with pytest.raises(ConfigurationError):
            RAGPipeline(llm=fake_llm, config=RAGConfig(retrieval_top_k=0))


class TestStatistics:
    """Query statistics and health."""

    @pytest.mark.asyncio
    async def test_counts_by_status(self, pipeline) -> None:
        """Should count queries per answer status."""
        await pipeline.query("How do I solve 2x+5=15 for x?")
        await pipeline.query("What is the capital of France?")

        stats = pipeline.get_statistics()
        assert stats["total_queries"] == 2
        assert stats["successful_queries"] == 2
        assert stats["status_counts"]["answered"] == 1
        assert stats["status_counts"]["no_relevant_documents"] == 1
        assert stats["index_builds"] == 1
        assert stats["success_rate"] == pytest.approx(100.0)

    def test_health_without_llm_check(self, pipeline) -> None:
        """Should report an unknown LLM when the client has no health check."""
        health = pipeline.health_check()

        assert health["components"]["llm"] == "unknown"
        assert health["status"] == "healthy"
