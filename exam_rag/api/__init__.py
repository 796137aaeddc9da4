# API Module
"""Flask API layer for the exam assistant."""

from .app import create_app

__all__ = ["create_app"]
