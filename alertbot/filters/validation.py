"""
Validation and sanitization helpers for subscriber keyword input.

The matching engine itself accepts any string; these helpers are used where
subscribers submit keyword specifications, so obvious mistakes are reported
back instead of being silently repaired.
"""

from __future__ import annotations

import re
from typing import Optional

from alertbot.config.settings import get_settings


class UserInputError(ValueError):
    """Raised when user input cannot be parsed/validated."""


# Unicode letters/numbers, whitespace and the keyword syntax characters * [ ] / | +
_KEYWORD_SYNTAX_RE = re.compile(r"^(?:[^\W_]|[\s*\[\]/|+])+$")


def sanitize_keywords(text: Optional[str]) -> str:
    """
    Normalize a keyword specification for storage.

    Supports comma-separated and newline-separated input. Tokens are trimmed,
    blank tokens dropped and the rest joined with ", ".
    """
    raw = (text or "").strip()
    if not raw:
        return ""
    raw = raw.replace("\n", ",")
    return ", ".join(part.strip() for part in raw.split(",") if part.strip())


def validate_keyword_syntax(keyword: str) -> bool:
    """Check that a single token only uses letters, numbers and keyword syntax."""
    return bool(_KEYWORD_SYNTAX_RE.match(keyword))


def validate_keywords(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Sanitize and validate a keyword specification.

    Args:
        text: Raw specification as typed by the subscriber
        max_length: Maximum specification length (defaults to settings)

    Returns:
        Sanitized specification ("" clears the keywords)

    Raises:
        UserInputError: If the specification is too long or contains
            unsupported characters
    """
    if max_length is None:
        max_length = get_settings().matcher.max_keywords_length

    sanitized = sanitize_keywords(text)
    if len(sanitized) > max_length:
        raise UserInputError(
            f"Keyword list is too long ({len(sanitized)} > {max_length} characters)"
        )

    invalid = [token for token in sanitized.split(", ") if token and not validate_keyword_syntax(token)]
    if invalid:
        raise UserInputError(f"Unsupported characters in keywords: {', '.join(invalid)}")

    return sanitized
