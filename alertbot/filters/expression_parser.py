"""
Keyword expression parser.

Turns a subscriber-authored, comma-separated keyword specification into a
ParsedExpression. Supported syntax:

- ``[term]``            required term
- ``[a|b]``, ``[a/b]``  required OR group (members may be ``x+y`` AND-items)
- ``a+b``               AND group
- ``senior python``     phrase (adjacent words)
- ``admin*``            wildcard (prefix match)
- ``term``              optional exact term

Parsing never fails: malformed pieces are repaired or dropped and reported
through the logger.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from alertbot.domain.entities import KeywordToken, ParsedExpression, TermKind

logger = logging.getLogger(__name__)


# Terms that contain "+" (or look like they belong to that family) but are
# never AND groups. Compared case-insensitively against the whole token.
LITERAL_PLUS_TERMS = frozenset({"c++", "c#", ".net", "f#"})

_CPP_RE = re.compile(re.escape("c++"), re.IGNORECASE)
_CPP_PLACEHOLDER = "\x00cpp\x00"

_BRACKET_GROUP_RE = re.compile(r"\[[^\[\]]*\]")
_BRACKET_SPLIT_RE = re.compile(r"(\[[^\[\]]*\])")

_OR_SEPARATORS = ("|", "/")

_BUCKET_FIELDS: dict[TermKind, str] = {
    TermKind.REQUIRED: "required",
    TermKind.REQUIRED_OR: "required_or",
    TermKind.AND_GROUP: "and_groups",
    TermKind.PHRASE: "phrases",
    TermKind.WILDCARD: "wildcards",
    TermKind.OPTIONAL: "optional",
}

_SINGLE_TERM_KINDS = frozenset({TermKind.REQUIRED, TermKind.WILDCARD, TermKind.OPTIONAL})


# ================================================================================
# Tokenization
# ================================================================================


def _collapse(term: str) -> str:
    return " ".join(term.split())


def split_tokens(keywords: Optional[str]) -> list[str]:
    """
    Split a specification string on commas.

    Tokens are trimmed and blank tokens are dropped.

    Args:
        keywords: Raw specification string

    Returns:
        List of raw tokens
    """
    if not keywords:
        return []
    return [token.strip() for token in keywords.split(",") if token.strip()]


def repair_bracket_tokens(tokens: list[str]) -> list[str]:
    """
    Split tokens where a bracket group was not followed by a comma.

    ``"[admin*] linux python"`` becomes ``["[admin*]", "linux", "python"]``:
    every bracket group is kept whole and every remaining word becomes a token
    of its own. Token order is preserved.

    Args:
        tokens: Tokens produced by split_tokens

    Returns:
        Repaired token list
    """
    repaired: list[str] = []

    for token in tokens:
        if "[" not in token or "]" not in token or _BRACKET_GROUP_RE.fullmatch(token):
            repaired.append(token)
            continue

        parts: list[str] = []
        for piece in _BRACKET_SPLIT_RE.split(token):
            piece = piece.strip()
            if not piece:
                continue
            if _BRACKET_GROUP_RE.fullmatch(piece):
                parts.append(piece)
            else:
                parts.extend(piece.split())

        logger.warning("Malformed bracket syntax auto-split: %r -> %r", token, parts)
        repaired.extend(parts)

    return repaired


def split_and_terms(item: str) -> tuple[str, ...]:
    """
    Split a ``+``-joined item into its sub-terms.

    The literal ``c++`` is protected from the split, so ``"c++ + remote"``
    yields ``("c++", "remote")``. Blank parts are dropped.

    Args:
        item: Token or OR-group member containing ``+``

    Returns:
        Tuple of sub-terms
    """
    protected = _CPP_RE.sub(_CPP_PLACEHOLDER, item)
    parts = []
    for part in protected.split("+"):
        part = _collapse(part.replace(_CPP_PLACEHOLDER, "c++"))
        if part:
            parts.append(part)
    return tuple(parts)


# ================================================================================
# Classification
# ================================================================================


def _strip_stray_brackets(token: str) -> str:
    if ("[" in token) == ("]" in token):
        return token
    cleaned = _collapse(token.replace("[", " ").replace("]", " "))
    logger.warning("Unbalanced bracket removed from keyword: %r -> %r", token, cleaned)
    return cleaned


def _classify_bracket_group(token: str) -> Optional[KeywordToken]:
    content = token[1:-1].strip()
    if not content:
        logger.warning("Empty bracket syntax ignored: %r", token)
        return None

    separator = next((sep for sep in _OR_SEPARATORS if sep in content), None)
    if separator is None:
        return KeywordToken(TermKind.REQUIRED, (_collapse(content),), token)

    members = tuple(_collapse(m) for m in content.split(separator) if m.strip())
    if not members:
        logger.warning("Empty OR group ignored: %r", token)
        return None
    return KeywordToken(TermKind.REQUIRED_OR, members, token)


def classify_token(token: str) -> Optional[KeywordToken]:
    """
    Classify a single raw token.

    Precedence: bracket group, AND group, phrase, wildcard, optional term.

    Args:
        token: Raw token (already split and repaired)

    Returns:
        Classified KeywordToken, or None if the token carries no usable content
    """
    token = _strip_stray_brackets(token.strip())
    if not token:
        return None

    if _BRACKET_GROUP_RE.fullmatch(token):
        return _classify_bracket_group(token)

    if "+" in token and token.lower() not in LITERAL_PLUS_TERMS:
        parts = split_and_terms(token)
        if len(parts) >= 2:
            return KeywordToken(TermKind.AND_GROUP, parts, token)

    words = tuple(token.split())
    if len(words) > 1:
        return KeywordToken(TermKind.PHRASE, words, token)

    if token.endswith("*"):
        return KeywordToken(TermKind.WILDCARD, (token,), token)

    return KeywordToken(TermKind.OPTIONAL, (token,), token)


# ================================================================================
# Main Entry Point
# ================================================================================


def parse_expression(keywords: Optional[str]) -> ParsedExpression:
    """
    Parse a keyword specification string.

    Pure and total: the same input always yields an equal expression, and
    malformed input is repaired or dropped with a logged warning instead of
    raising.

    Args:
        keywords: Raw comma-separated specification string

    Returns:
        ParsedExpression with every usable token in exactly one bucket
    """
    buckets: dict[TermKind, list] = {kind: [] for kind in TermKind}

    for raw in repair_bracket_tokens(split_tokens(keywords)):
        token = classify_token(raw)
        if token is None:
            continue
        if token.kind in _SINGLE_TERM_KINDS:
            buckets[token.kind].append(token.terms[0])
        else:
            buckets[token.kind].append(token.terms)

    fields = {
        _BUCKET_FIELDS[kind]: tuple(dict.fromkeys(items))
        for kind, items in buckets.items()
    }

    expression = ParsedExpression(**fields)
    logger.debug(f"Parsed keyword expression {keywords!r}: {expression!r}")
    return expression
