"""
Flask Application Factory
==========================

Creates and configures the Flask application with all routes.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from exam_rag.config.settings import ServerConfig

logger = logging.getLogger(__name__)


def create_app(rag_pipeline, config: Optional[ServerConfig] = None) -> Flask:
    """
    Create Flask application with RAG pipeline.

    Args:
        rag_pipeline: RAGPipeline instance
        config: Server configuration

    Returns:
        Configured Flask application
    """
    config = config or ServerConfig()

    app = Flask(__name__)
    app.json.sort_keys = False

    # Configure CORS
    if config.cors_enabled:
        CORS(app, origins=config.cors_origins)

    # Register blueprints
    from .routes.chat import create_chat_blueprint
    from .routes.health import create_health_blueprint

    app.register_blueprint(create_chat_blueprint(rag_pipeline))
    app.register_blueprint(create_health_blueprint(rag_pipeline))

    @app.route("/")
    def index():
        """Service description."""
        return jsonify({
            "service": "exam-assistant-rag",
            "endpoints": [
                "POST /api/query",
                "POST /api/reinitialize",
                "GET /api/health",
                "GET /api/status",
                "GET /api/stats",
            ],
        })

    logger.info("Flask application created successfully")
    return app
