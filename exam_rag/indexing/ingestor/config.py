"""
Ingestor Configuration
======================

Default parameters for embedding and indexing.
"""

# Embedding cache
DEFAULT_CACHE_SIZE = 2048

# Length statistics are kept small so they do not dominate the cosine
WORD_COUNT_SCALE = 1000.0
CHAR_COUNT_SCALE = 10000.0

# Relative weight of the trailing subject features in similarity
SUBJECT_FEATURE_WEIGHT = 2.0
