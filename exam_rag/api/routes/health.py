"""
Health Routes Blueprint
=======================

API endpoints for health checks, pipeline status and statistics.
"""

import logging
from flask import Blueprint, jsonify

logger = logging.getLogger(__name__)


def create_health_blueprint(rag_pipeline) -> Blueprint:
    """
    Create health blueprint with RAG pipeline.

    Args:
        rag_pipeline: RAGPipeline instance

    Returns:
        Flask Blueprint
    """
    bp = Blueprint('health', __name__, url_prefix='/api')

    @bp.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify(rag_pipeline.health_check())

    @bp.route("/status", methods=["GET"])
    def status():
        """Corpus and configuration status."""
        return jsonify(rag_pipeline.get_status())

    @bp.route("/stats", methods=["GET"])
    def stats():
        """System statistics endpoint."""
        return jsonify(rag_pipeline.get_statistics())

    return bp
