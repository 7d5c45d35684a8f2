"""
Keyword matching module for filtering channel messages.

This module evaluates parsed keyword expressions against normalized message
text. Term boundaries are whitespace (or start/end of text) and wildcard
prefixes extend over Unicode letters and numbers, so Cyrillic and other
non-Latin scripts match the same way Latin text does.
"""

import logging
import re
from functools import lru_cache
from typing import Optional, Sequence

from alertbot.domain.entities import MatchResult, ParsedExpression
from alertbot.filters.expression_parser import (
    LITERAL_PLUS_TERMS,
    parse_expression,
    split_and_terms,
)
from alertbot.nlp.preprocess import normalize_text, truncate_text

logger = logging.getLogger(__name__)


# Unicode letters and numbers (\w without the underscore)
_WORD_CHARS = r"[^\W_]"

# Term boundaries inside normalized text: start/end of text or whitespace
_STRICT_BOUNDARIES = (r"(?<!\S)", r"(?!\S)")

# Boundaries for raw, unnormalized text: not glued to a letter or number
_LOOSE_BOUNDARIES = (r"(?<![^\W_])", r"(?![^\W_])")


# ================================================================================
# Pattern Construction
# ================================================================================


def _word_regex(word: str) -> str:
    if not word.endswith("*"):
        return re.escape(word)
    prefix = word[:-1]
    if not prefix:
        # A bare "*" inside a phrase stands for any single word
        return f"{_WORD_CHARS}+"
    return f"{re.escape(prefix)}{_WORD_CHARS}*"


@lru_cache(maxsize=4096)
def _compile_words(words: tuple[str, ...], strict: bool = True) -> Optional[re.Pattern]:
    """
    Compile a boundary-anchored pattern for a sequence of words.

    Args:
        words: Words of a term or phrase, in order
        strict: Use whitespace boundaries (normalized text) instead of
            letter/number boundaries (raw text)

    Returns:
        Compiled pattern, or None if the words can never match
    """
    if not words:
        return None
    if len(words) == 1 and words[0] == "*":
        return None

    left, right = _STRICT_BOUNDARIES if strict else _LOOSE_BOUNDARIES
    body = r"\s+".join(_word_regex(word) for word in words)
    return re.compile(f"{left}{body}{right}", re.IGNORECASE)


# ================================================================================
# Term Containment
# ================================================================================


def contains_keyword(text: str, keyword: str) -> bool:
    """
    Check whether a single term occurs in text.

    - ``python`` matches only the whole word ``python``
    - ``admin*`` matches any word starting with ``admin``; a bare ``*`` never matches
    - a term with inner whitespace is matched as a phrase

    Args:
        text: Normalized text
        keyword: Term to look for

    Returns:
        True if the term occurs in text
    """
    if not text or not keyword:
        return False
    pattern = _compile_words(tuple(keyword.split()))
    return pattern is not None and pattern.search(text) is not None


def contains_phrase(text: str, words: Sequence[str]) -> bool:
    """
    Check whether words occur adjacently and in order.

    Words are separated by one or more whitespace characters in text; words
    ending in ``*`` are wildcards at their position.

    Args:
        text: Normalized text
        words: Phrase words

    Returns:
        True if the phrase occurs in text
    """
    if not text or not words:
        return False
    pattern = _compile_words(tuple(words))
    return pattern is not None and pattern.search(text) is not None


def contains_and_item(text: str, item: str) -> bool:
    """
    Check whether every sub-term of a ``+``-joined item occurs in text.

    Args:
        text: Normalized text
        item: Item such as ``java+kotlin``

    Returns:
        True if all sub-terms occur
    """
    parts = split_and_terms(item)
    if not parts:
        return False
    return all(contains_keyword(text, part) for part in parts)


def _member_matches(text: str, member: str) -> bool:
    if "+" in member and member.lower() not in LITERAL_PLUS_TERMS:
        return contains_and_item(text, member)
    return contains_keyword(text, member)


def find_matches(text: str, expression: ParsedExpression) -> list[str]:
    """
    Collect matching optional terms, wildcards and phrases.

    Phrases are reported joined by a single space.

    Args:
        text: Normalized text
        expression: Parsed expression

    Returns:
        Matched terms in bucket order
    """
    matches: list[str] = []

    for keyword in expression.optional:
        if contains_keyword(text, keyword):
            matches.append(keyword)

    for keyword in expression.wildcards:
        if contains_keyword(text, keyword):
            matches.append(keyword)

    for phrase in expression.phrases:
        if contains_phrase(text, phrase):
            matches.append(" ".join(phrase))

    return matches


# ================================================================================
# Evaluation
# ================================================================================


def evaluate_expression(
    text: str,
    include: ParsedExpression,
    ignore: Optional[ParsedExpression] = None,
) -> MatchResult:
    """
    Evaluate a subscriber's include/ignore expressions against message text.

    Order of checks:
    1. any ignore term present -> blocked
    2. all required terms present
    3. every required OR group has a satisfied member
    4. AND groups: fully present groups count as matches, partially present
       groups are not satisfied but do not reject the message
    5. optional terms, wildcards and phrases

    With required criteria (2-3) the message matches once they pass;
    otherwise at least one match from 4 or 5 is needed.

    Args:
        text: Text already normalized by the caller
        include: Parsed include expression
        ignore: Parsed ignore expression (optional)

    Returns:
        MatchResult for this evaluation
    """
    text = text or ""

    if ignore is not None:
        ignored = [term for term in ignore.veto_terms() if _member_matches(text, term)]
        if ignored:
            logger.debug(f"Blocked by ignore keywords: {ignored}")
            return MatchResult(
                is_match=False,
                blocked_by_ignore=True,
                ignored_keywords=ignored,
            )

    required_matches = [kw for kw in include.required if contains_keyword(text, kw)]
    if len(required_matches) != len(include.required):
        logger.debug(
            "Required keywords missing: %s/%s matched",
            len(required_matches),
            len(include.required),
        )
        return MatchResult(is_match=False)

    for or_group in include.required_or:
        if not any(_member_matches(text, member) for member in or_group):
            logger.debug(f"Required OR group not satisfied: {list(or_group)}")
            return MatchResult(is_match=False)

    and_matches: list[str] = []
    for and_group in include.and_groups:
        present = [kw for kw in and_group if contains_keyword(text, kw)]
        if not present:
            continue
        if len(present) == len(and_group):
            and_matches.extend(and_group)
        else:
            logger.debug(f"AND group partially present, not counted: {present} of {list(and_group)}")

    optional_matches = find_matches(text, include)

    if include.has_required_criteria:
        is_match = True
    else:
        is_match = bool(optional_matches or and_matches)

    if not is_match and logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "No match found - normalized text: %r, optional matches: %s, AND group matches: %s",
            truncate_text(text, 100),
            len(optional_matches),
            len(and_matches),
        )

    matched_keywords = list(dict.fromkeys(required_matches + optional_matches + and_matches))

    return MatchResult(is_match=is_match, matched_keywords=matched_keywords)


def match_keywords(
    text: str,
    keywords: str,
    ignore_keywords: Optional[str] = None,
    *,
    normalize: bool = True,
) -> MatchResult:
    """
    Parse specification strings and evaluate them against text.

    Convenience wrapper for one-off checks; the pipeline parses through a
    cache instead.

    Args:
        text: Message text
        keywords: Include specification string
        ignore_keywords: Ignore specification string (optional)
        normalize: Normalize text before matching

    Returns:
        MatchResult
    """
    normalized = normalize_text(text) if normalize else (text or "")
    include = parse_expression(keywords)
    ignore = parse_expression(ignore_keywords) if ignore_keywords else None
    return evaluate_expression(normalized, include, ignore)


# ================================================================================
# Utility Functions
# ================================================================================


def highlight_keywords(
    text: str,
    match: MatchResult,
    highlight_format: str = "**{keyword}**",
) -> str:
    """
    Highlight matched keywords in text.

    Works on raw message text, so terms only need to be separated from
    neighbouring letters and numbers, not by whitespace.

    Args:
        text: Original text
        match: MatchResult from evaluation
        highlight_format: Format string for highlighting (must contain {keyword})

    Returns:
        Text with highlighted keywords
    """
    if not match.is_match or not text:
        return text

    # Longest first, in a single pass, so a phrase wins over its own words
    patterns = [
        _compile_words(tuple(keyword.split()), strict=False)
        for keyword in sorted(match.matched_keywords, key=len, reverse=True)
    ]
    alternatives = [f"(?:{p.pattern})" for p in patterns if p is not None]
    if not alternatives:
        return text

    combined = re.compile("|".join(alternatives), re.IGNORECASE)
    replacement = highlight_format.replace("\\", "\\\\").replace("{keyword}", r"\g<0>")
    return combined.sub(replacement, text)
