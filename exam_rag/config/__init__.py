# Config Module
"""Configuration module for RAG system settings."""

from .settings import AppConfig, DocumentSourceConfig, ModelConfig, RAGConfig, ServerConfig
from .logging_config import setup_logging

__all__ = [
    "AppConfig",
    "DocumentSourceConfig",
    "ModelConfig",
    "RAGConfig",
    "ServerConfig",
    "setup_logging",
]
