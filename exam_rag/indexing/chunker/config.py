"""
Chunker Configuration
=====================

Default parameters for text chunking.
"""

# Default chunking parameters (characters)
DEFAULT_CHUNK_SIZE = 500      # target characters per chunk
DEFAULT_CHUNK_OVERLAP = 50    # characters shared by consecutive chunks

