"""
Text preprocessing and normalization module.

Messages are normalized once before keyword matching:
- lowercasing
- punctuation and symbols replaced by spaces (keyword syntax characters kept)
- whitespace collapsed
"""

import re


# Everything except Unicode letters/numbers, whitespace and the keyword
# syntax characters + * / [ ]
_NOISE_RE = re.compile(r"[^\w\s+*/\[\]]|_", re.UNICODE)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace in text.

    Replaces multiple spaces, tabs, newlines with single space.

    Args:
        text: Text to normalize

    Returns:
        Text with normalized whitespace
    """
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(text: str) -> str:
    """
    Normalize message text for keyword matching.

    Args:
        text: Original message text

    Returns:
        Lowercased text with punctuation replaced by spaces and whitespace collapsed
    """
    if not text:
        return ""

    normalized = _NOISE_RE.sub(" ", text.lower())
    return normalize_whitespace(normalized)


def truncate_text(text: str, max_length: int) -> str:
    """
    Truncate text to max_length characters, marking the cut with "...".

    Args:
        text: Text to truncate
        max_length: Maximum resulting length

    Returns:
        Text no longer than max_length
    """
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."
