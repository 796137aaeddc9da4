#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exam Assistant RAG - Entry Point
================================

Retrieval-augmented chat over uploaded course documents with a Flask
web interface.

Usage:
    python -m exam_rag.main --documents documents.json

For CLI mode:
    python -m exam_rag.main --documents documents.json --question "Your question here"

Documents are read from Supabase when --supabase-url and --supabase-key
(or SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY) are set.
"""

import argparse
import asyncio
import json
import os
from typing import Optional

from exam_rag.config.logging_config import setup_logging
from exam_rag.config.settings import AppConfig, DocumentSourceConfig, ModelConfig, ServerConfig
from exam_rag.services.document_source import (
    DocumentSource,
    JsonFileDocumentSource,
    StaticDocumentSource,
    SupabaseDocumentSource,
)
from exam_rag.services.ollama_service import OllamaClient
from exam_rag.services.rag_service import RAGPipeline
from exam_rag.api.app import create_app

# Setup logging
logger = setup_logging()


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Exam Assistant RAG with Web Interface",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Document source arguments
    parser.add_argument(
        "--documents",
        default=None,
        help="JSON file with course documents"
    )
    parser.add_argument(
        "--supabase-url",
        default=os.environ.get("SUPABASE_URL"),
        help="Supabase project URL"
    )
    parser.add_argument(
        "--supabase-key",
        default=os.environ.get("SUPABASE_SERVICE_ROLE_KEY"),
        help="Supabase service role key"
    )
    parser.add_argument(
        "--supabase-table",
        default="documents",
        help="Table holding uploaded documents"
    )

    # Model arguments
    parser.add_argument(
        "--ollama-model",
        default="llama3.1:latest",
        help="Ollama text model name"
    )
    parser.add_argument(
        "--ollama-vision-model",
        default="llava:latest",
        help="Ollama vision model name"
    )
    parser.add_argument(
        "--ollama-base-url",
        default="http://localhost:11434",
        help="Ollama server URL"
    )
    parser.add_argument(
        "--ollama-timeout",
        type=int,
        default=120,
        help="Ollama request timeout in seconds"
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=0.3,
        help="Sampling temperature for answers"
    )

    # RAG parameters
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=500,
        help="Characters per chunk"
    )
    parser.add_argument(
        "--chunk-overlap",
        type=int,
        default=50,
        help="Characters shared by consecutive chunks"
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=15,
        help="Number of chunks to retrieve"
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=3,
        help="Number of chunks kept after reranking"
    )
    parser.add_argument(
        "--min-relevance",
        type=float,
        default=0.3,
        help="Minimum rerank score"
    )
    parser.add_argument(
        "--staleness-minutes",
        type=float,
        default=30.0,
        help="Reload documents after this many minutes"
    )
    parser.add_argument(
        "--embedding-cache-size",
        type=int,
        default=2048,
        help="Cached embedding vectors (0 disables the cache)"
    )
    parser.add_argument(
        "--vocabulary",
        default=None,
        help="Custom subject vocabulary JSON file"
    )

    # Web server arguments
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Flask host"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5006,
        help="Flask port"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run Flask in debug mode"
    )

    # CLI/Testing arguments
    parser.add_argument(
        "--question",
        help="Single question to process (CLI mode)"
    )
    parser.add_argument(
        "--image",
        help="Image file to ask about together with --question"
    )
    parser.add_argument(
        "--smoke-test",
        action="store_true",
        help="Run smoke tests before starting web server"
    )

    return parser.parse_args(argv)


def build_document_source(config: DocumentSourceConfig) -> DocumentSource:
    """Pick the document source from configuration."""
    if config.supabase_url and config.supabase_key:
        logger.info(f"Reading documents from Supabase table '{config.supabase_table}'")
        return SupabaseDocumentSource(
            url=config.supabase_url,
            api_key=config.supabase_key,
            table=config.supabase_table,
            timeout=config.timeout,
        )
    if config.documents_path:
        logger.info(f"Reading documents from {config.documents_path}")
        return JsonFileDocumentSource(config.documents_path)

    logger.warning("No document source configured; answering without course documents")
    return StaticDocumentSource()


def build_llm(config: ModelConfig) -> OllamaClient:
    """Create the Ollama client."""
    return OllamaClient(
        base_url=config.ollama_base_url,
        default_model=config.ollama_model,
        vision_model=config.ollama_vision_model,
        timeout=config.ollama_timeout,
        temperature=config.temperature,
        auto_test_connection=True,
    )


def run_cli_mode(rag_pipeline: RAGPipeline, question: str, image: Optional[str] = None):
    """Run in CLI mode with a single question."""
    print(f"\nProcessing question: {question}")
    if image:
        response = asyncio.run(rag_pipeline.query_with_image(question, image))
    else:
        response = asyncio.run(rag_pipeline.query(question))

    print(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))


def run_smoke_tests(rag_pipeline: RAGPipeline):
    """Run smoke tests to verify system functionality."""
    test_queries = [
        "How do I solve 2x + 5 = 15 for x?",
        "What caused the decline of the Indus Valley civilization?",
        "Explain photosynthesis in plants.",
        "What is the capital of France?",
    ]

    print("\n🧪 Running smoke tests:")
    for i, query in enumerate(test_queries, 1):
        print(f"\n{i}. Testing: {query}")
        response = asyncio.run(rag_pipeline.query(query))
        marker = "⚠️" if response.is_degraded else "✅"
        print(f"   {marker} Status: {response.status.value} | Time: {response.processing_time:.2f}s")
        print(f"   Answer: {response.response[:150]}{'...' if len(response.response) > 150 else ''}")
        if response.source_documents:
            print(f"   Sources: {', '.join(doc.title for doc in response.source_documents)}")


def run_web_server(rag_pipeline: RAGPipeline, server_config: ServerConfig):
    """Start the Flask web server."""
    app = create_app(rag_pipeline, server_config)

    print("\n" + "=" * 60)
    print("📚 Exam Assistant RAG Ready!")
    print(f"API Endpoint: http://{server_config.host}:{server_config.port}/api/query")
    print(f"Health Check: http://{server_config.host}:{server_config.port}/api/health")
    print(f"Status: http://{server_config.host}:{server_config.port}/api/status")
    print(f"Statistics: http://{server_config.host}:{server_config.port}/api/stats")
    print("=" * 60)

    try:
        app.run(
            host=server_config.host,
            port=server_config.port,
            debug=server_config.debug
        )
    except KeyboardInterrupt:
        print("\nShutting down Exam Assistant RAG...")
    except Exception as e:
        logger.error(f"Failed to start web server: {e}")
        raise


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    print("=" * 60)
    print("📚 Initializing Exam Assistant RAG")
    print("=" * 60)

    config = AppConfig.from_args(args)

    logger.info("Building RAG pipeline...")
    try:
        rag_pipeline = RAGPipeline(
            llm=build_llm(config.model),
            document_source=build_document_source(config.source),
            config=config.rag,
        )
        logger.info("RAG pipeline initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize RAG pipeline: {e}")
        raise

    # CLI mode for single questions
    if args.question:
        run_cli_mode(rag_pipeline, args.question, args.image)
        return

    # Optional smoke tests
    if args.smoke_test:
        run_smoke_tests(rag_pipeline)

    # Start web server
    run_web_server(rag_pipeline, config.server)


if __name__ == "__main__":
    main()
