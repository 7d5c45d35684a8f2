"""
Domain layer module.

Contains business logic entities and domain models.
"""

from alertbot.domain.entities import (
    ChannelMessage,
    KeywordToken,
    MatchResult,
    NotificationMessage,
    ParsedExpression,
    Subscriber,
    TermKind,
)

__all__ = [
    "ChannelMessage",
    "KeywordToken",
    "MatchResult",
    "NotificationMessage",
    "ParsedExpression",
    "Subscriber",
    "TermKind",
]
