"""
Configuration Settings for the Exam Assistant RAG Core
======================================================

Centralized configuration using dataclasses for type safety and easy management.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Set

from exam_rag.core.exceptions import ConfigurationError
from exam_rag.indexing.chunker.config import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from exam_rag.indexing.ingestor.config import DEFAULT_CACHE_SIZE


@dataclass
class ModelConfig:
    """Configuration for the hosted models."""

    # LLM Configuration
    ollama_model: str = "llama3.1:latest"
    ollama_vision_model: str = "llava:latest"
    ollama_base_url: str = "http://localhost:11434"
    ollama_timeout: int = 120
    temperature: float = 0.3


@dataclass
class RAGConfig:
    """Configuration for RAG pipeline parameters."""

    # Chunking
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP

    # Retrieval Parameters
    retrieval_top_k: int = 15  # Candidates fetched from the vector store

    # Reranking
    reranker_top_n: int = 3
    min_relevance_threshold: float = 0.3

    # Corpus freshness
    staleness_minutes: float = 30.0

    # Embeddings
    embedding_cache_size: int = DEFAULT_CACHE_SIZE
    vocabulary_path: Optional[str] = None  # None means the packaged vocabulary

    def validate(self) -> None:
        """Raise ConfigurationError for values the pipeline cannot run with."""
        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size must be positive", {"chunk_size": self.chunk_size})
        if self.chunk_overlap < 0:
            raise ConfigurationError("chunk_overlap must not be negative", {"chunk_overlap": self.chunk_overlap})
        if self.retrieval_top_k < 1:
            raise ConfigurationError("retrieval_top_k must be positive", {"retrieval_top_k": self.retrieval_top_k})
        if self.reranker_top_n < 1:
            raise ConfigurationError("reranker_top_n must be positive", {"reranker_top_n": self.reranker_top_n})
        if self.staleness_minutes <= 0:
            raise ConfigurationError(
                "staleness_minutes must be positive", {"staleness_minutes": self.staleness_minutes}
            )
        if self.embedding_cache_size < 0:
            raise ConfigurationError(
                "embedding_cache_size must not be negative",
                {"embedding_cache_size": self.embedding_cache_size},
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> Set[str]:
        return {f.name for f in fields(cls)}


@dataclass
class DocumentSourceConfig:
    """Where course documents come from."""

    documents_path: Optional[str] = None  # JSON file with a list of documents
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    supabase_table: str = "documents"
    timeout: int = 30


@dataclass
class ServerConfig:
    """Configuration for Flask web server."""

    host: str = "127.0.0.1"
    port: int = 5006
    debug: bool = False

    # CORS settings
    cors_enabled: bool = True
    cors_origins: str = "*"


@dataclass
class AppConfig:
    """Complete application configuration."""

    model: ModelConfig = field(default_factory=ModelConfig)
    rag: RAGConfig = field(default_factory=RAGConfig)
    source: DocumentSourceConfig = field(default_factory=DocumentSourceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_args(cls, args) -> "AppConfig":
        """Create configuration from command line arguments."""
        return cls(
            model=ModelConfig(
                ollama_model=getattr(args, "ollama_model", "llama3.1:latest"),
                ollama_vision_model=getattr(args, "ollama_vision_model", "llava:latest"),
                ollama_base_url=getattr(args, "ollama_base_url", "http://localhost:11434"),
                ollama_timeout=getattr(args, "ollama_timeout", 120),
                temperature=getattr(args, "temperature", 0.3),
            ),
            rag=RAGConfig(
                chunk_size=getattr(args, "chunk_size", DEFAULT_CHUNK_SIZE),
                chunk_overlap=getattr(args, "chunk_overlap", DEFAULT_CHUNK_OVERLAP),
                retrieval_top_k=getattr(args, "top_k", 15),
                reranker_top_n=getattr(args, "top_n", 3),
                min_relevance_threshold=getattr(args, "min_relevance", 0.3),
                staleness_minutes=getattr(args, "staleness_minutes", 30.0),
                embedding_cache_size=getattr(args, "embedding_cache_size", DEFAULT_CACHE_SIZE),
                vocabulary_path=getattr(args, "vocabulary", None),
            ),
            source=DocumentSourceConfig(
                documents_path=getattr(args, "documents", None),
                supabase_url=getattr(args, "supabase_url", None),
                supabase_key=getattr(args, "supabase_key", None),
                supabase_table=getattr(args, "supabase_table", "documents"),
            ),
            server=ServerConfig(
                host=getattr(args, "host", "127.0.0.1"),
                port=getattr(args, "port", 5006),
                debug=getattr(args, "debug", False),
            ),
        )
