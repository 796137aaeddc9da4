# Core Processors Module
"""Query analysis components."""

from .subject_detector import SubjectDetector

__all__ = [
    "SubjectDetector",
]
