"""Filtering pipeline applying subscriber keyword expressions to a message.

This module orchestrates per-subscriber matching using:
- alertbot.filters.expression_parser
- alertbot.filters.keyword_matcher

It is intentionally domain-oriented (works with alertbot.domain.entities.Subscriber).
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Optional

from alertbot.config.settings import get_settings
from alertbot.domain.entities import MatchResult, ParsedExpression, Subscriber
from alertbot.filters.expression_parser import parse_expression
from alertbot.filters.keyword_matcher import evaluate_expression
from alertbot.nlp.preprocess import normalize_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Runtime pipeline switches (typically derived from settings)."""

    max_message_length: int = 4096
    cache_expressions: bool = True
    expression_cache_size: int = 1024


@dataclass(frozen=True)
class SubscriberMatch:
    """A subscriber whose expressions matched the message."""

    subscriber: Subscriber
    result: MatchResult


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of running a message through all subscribers."""

    matches: list[SubscriberMatch]
    blocked_by_ignore: int = 0


class ExpressionCache:
    """
    Bounded LRU cache of parsed expressions keyed by specification string.

    Parsing is pure, so a cached expression is always equal to a fresh parse.
    """

    def __init__(self, max_size: int = 1024):
        self._max_size = max_size
        self._cache: OrderedDict[str, ParsedExpression] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, keywords: str) -> ParsedExpression:
        with self._lock:
            cached = self._cache.get(keywords)
            if cached is not None:
                self._cache.move_to_end(keywords)
                return cached

        expression = parse_expression(keywords)

        with self._lock:
            self._cache[keywords] = expression
            self._cache.move_to_end(keywords)
            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)
        return expression

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


def _parse(keywords: str, cache: Optional[ExpressionCache]) -> ParsedExpression:
    return cache.get(keywords) if cache is not None else parse_expression(keywords)


def match_subscriber(
    *,
    text: str,
    subscriber: Subscriber,
    normalized_text: Optional[str] = None,
    cache: Optional[ExpressionCache] = None,
) -> MatchResult:
    """Evaluate one subscriber's keyword and ignore expressions against message text."""

    if not subscriber.keywords:
        return MatchResult(is_match=False)

    if normalized_text is None:
        normalized_text = normalize_text(text)

    include = _parse(subscriber.keywords, cache)
    ignore = _parse(subscriber.ignore_keywords, cache) if subscriber.ignore_keywords else None

    return evaluate_expression(normalized_text, include, ignore)


def run_pipeline(
    *,
    text: str,
    subscribers: Iterable[Subscriber],
    normalized_text: Optional[str] = None,
    pipeline_config: Optional[PipelineConfig] = None,
    cache: Optional[ExpressionCache] = None,
) -> PipelineResult:
    """Run a message through all active subscribers and collect the matches."""

    if pipeline_config is None:
        settings = get_settings()
        pipeline_config = PipelineConfig(
            max_message_length=settings.matcher.max_message_length,
            cache_expressions=settings.matcher.cache_expressions,
            expression_cache_size=settings.matcher.expression_cache_size,
        )

    if text is None:
        text = ""

    # Apply global truncation to prevent large payloads.
    if pipeline_config.max_message_length and len(text) > pipeline_config.max_message_length:
        text = text[: pipeline_config.max_message_length]
        normalized_text = None

    if normalized_text is None:
        normalized_text = normalize_text(text)

    if cache is None and pipeline_config.cache_expressions:
        cache = ExpressionCache(max_size=pipeline_config.expression_cache_size)

    # Materialize once to avoid consuming iterables multiple times (and to log counts).
    subscribers_list = list(subscribers)

    out: list[SubscriberMatch] = []
    blocked = 0
    for subscriber in subscribers_list:
        if not subscriber.is_active or not subscriber.has_keywords:
            continue
        result = match_subscriber(
            text=text,
            subscriber=subscriber,
            normalized_text=normalized_text,
            cache=cache,
        )
        if result.blocked_by_ignore:
            blocked += 1
        elif result.is_match:
            out.append(SubscriberMatch(subscriber=subscriber, result=result))

    logger.debug(
        "Pipeline finished: subscribers=%s, matched=%s, blocked=%s",
        len(subscribers_list),
        len(out),
        blocked,
    )

    return PipelineResult(matches=out, blocked_by_ignore=blocked)
