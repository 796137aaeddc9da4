"""
Chat Routes Blueprint
=====================

API endpoints for query processing and corpus reloads.
"""

import asyncio
import logging

from flask import Blueprint, jsonify, request

from exam_rag.core.exceptions import DocumentSourceError

logger = logging.getLogger(__name__)


def create_chat_blueprint(rag_pipeline) -> Blueprint:
    """
    Create chat blueprint with RAG pipeline.

    Args:
        rag_pipeline: RAGPipeline instance

    Returns:
        Flask Blueprint
    """
    bp = Blueprint('chat', __name__, url_prefix='/api')

    @bp.route("/query", methods=["POST"])
    def query():
        """Process query through RAG pipeline."""
        try:
            data = request.get_json(force=True, silent=True) or {}
            query_text = str(data.get("query") or "").strip()

            if not query_text:
                return jsonify({"error": "Query is required"}), 400

            documents = data.get("documents")
            if documents is not None and not isinstance(documents, list):
                return jsonify({"error": "documents must be a list"}), 400

            image = data.get("image")
            if image:
                response = asyncio.run(rag_pipeline.query_with_image(query_text, image, documents))
            else:
                response = asyncio.run(rag_pipeline.query(query_text, documents))

            return jsonify(response.to_dict())

        except Exception as e:
            logger.exception("API query error")
            return jsonify({"error": str(e)}), 500

    @bp.route("/reinitialize", methods=["POST"])
    def reinitialize():
        """Force a corpus reload."""
        try:
            data = request.get_json(force=True, silent=True) or {}
            documents = data.get("documents")
            if documents is not None and not isinstance(documents, list):
                return jsonify({"error": "documents must be a list"}), 400

            rebuilt = asyncio.run(rag_pipeline.reinitialize(documents))
            return jsonify({"rebuilt": rebuilt, "status": rag_pipeline.get_status()})

        except DocumentSourceError as e:
            logger.error(f"Document source error during reinitialize: {e}")
            return jsonify({"error": str(e)}), 502
        except Exception as e:
            logger.exception("API reinitialize error")
            return jsonify({"error": str(e)}), 500

    return bp
