"""
Message filtering module.

Provides keyword expression parsing and matching for filtering channel messages.
"""

from alertbot.filters.expression_parser import classify_token, parse_expression
from alertbot.filters.keyword_matcher import (
    contains_keyword,
    contains_phrase,
    evaluate_expression,
    find_matches,
    highlight_keywords,
    match_keywords,
)

__all__ = [
    "classify_token",
    "contains_keyword",
    "contains_phrase",
    "evaluate_expression",
    "find_matches",
    "highlight_keywords",
    "match_keywords",
    "parse_expression",
]
