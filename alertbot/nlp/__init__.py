"""
NLP module for text processing.

Provides text normalization used before keyword matching.
"""

from alertbot.nlp.preprocess import normalize_text, normalize_whitespace, truncate_text

__all__ = [
    "normalize_text",
    "normalize_whitespace",
    "truncate_text",
]
