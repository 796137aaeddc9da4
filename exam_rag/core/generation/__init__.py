# Core Generation Module
"""Answer generation with strict prompting and fallback messages."""

from .base_generator import BaseGenerator, TextGenerationClient
from .strict_generator import StrictGenerator

__all__ = [
    "BaseGenerator",
    "TextGenerationClient",
    "StrictGenerator",
]
