"""
Domain entities for the Channel Alert Bot.

This module defines Pydantic models for domain entities that represent
business logic objects independent of the chat client and storage layers.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TermKind(str, Enum):
    """Classification of a single keyword token."""

    REQUIRED = "required"
    REQUIRED_OR = "required_or"
    AND_GROUP = "and_group"
    PHRASE = "phrase"
    WILDCARD = "wildcard"
    OPTIONAL = "optional"


# ================================================================================
# Keyword Expression Entities
# ================================================================================


@dataclass(frozen=True)
class KeywordToken:
    """
    A single comma-separated unit of a specification string after classification.

    Only lives while an expression is being parsed.
    """

    kind: TermKind
    terms: tuple[str, ...]
    raw: str


class ParsedExpression(BaseModel):
    """
    Structured form of a subscriber keyword specification.

    Buckets are disjoint: every token of the specification lands in exactly one
    of them. Single-term buckets keep the order of first appearance and hold no
    duplicates.
    """

    model_config = ConfigDict(frozen=True)

    required: tuple[str, ...] = Field(
        default=(),
        description="Terms that must all be present ([term])",
    )
    required_or: tuple[tuple[str, ...], ...] = Field(
        default=(),
        description="Groups where at least one member must be present ([a|b] or [a/b])",
    )
    and_groups: tuple[tuple[str, ...], ...] = Field(
        default=(),
        description="Groups of +-joined terms outside brackets",
    )
    optional: tuple[str, ...] = Field(
        default=(),
        description="Plain exact terms",
    )
    wildcards: tuple[str, ...] = Field(
        default=(),
        description="Terms ending in * (prefix match)",
    )
    phrases: tuple[tuple[str, ...], ...] = Field(
        default=(),
        description="Multi-word terms as ordered word sequences",
    )

    @property
    def is_empty(self) -> bool:
        """Check if the expression contains no terms at all."""
        return not (
            self.required
            or self.required_or
            or self.and_groups
            or self.optional
            or self.wildcards
            or self.phrases
        )

    @property
    def has_required_criteria(self) -> bool:
        """Check if the expression has bracketed (required) criteria."""
        return bool(self.required or self.required_or)

    def veto_terms(self) -> list[str]:
        """
        Flatten every bucket into a list of plain terms.

        Used for ignore expressions, where only "does any term occur" matters.
        Phrases are returned joined by a single space.
        """
        terms: list[str] = []
        terms.extend(self.required)
        for group in self.required_or:
            terms.extend(group)
        for group in self.and_groups:
            terms.extend(group)
        terms.extend(self.optional)
        terms.extend(self.wildcards)
        terms.extend(" ".join(words) for words in self.phrases)
        return list(dict.fromkeys(terms))


class MatchResult(BaseModel):
    """
    Result of evaluating a subscriber's expressions against a message.
    """

    model_config = ConfigDict(frozen=True)

    is_match: bool = Field(description="Whether the message is relevant to the subscriber")
    blocked_by_ignore: bool = Field(
        default=False,
        description="Whether an ignore term vetoed the message",
    )
    matched_keywords: list[str] = Field(
        default_factory=list,
        description="Include terms that matched",
    )
    ignored_keywords: list[str] = Field(
        default_factory=list,
        description="Ignore terms that matched",
    )


# ================================================================================
# Message and Subscriber Entities
# ================================================================================


class Subscriber(BaseModel):
    """Domain representation of a bot user with keyword preferences."""

    telegram_id: int = Field(description="Telegram user ID")
    keywords: Optional[str] = Field(default=None, description="Include specification string")
    ignore_keywords: Optional[str] = Field(
        default=None, description="Ignore (veto) specification string"
    )
    is_active: bool = Field(default=True)
    language: str = Field(default="en", max_length=8)

    @field_validator("keywords", "ignore_keywords")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank specifications as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def has_keywords(self) -> bool:
        return self.keywords is not None


class ChannelMessage(BaseModel):
    """
    A message received from a monitored channel.

    `text` is the plain text used for keyword matching; `formatted_text` keeps
    the markup used when the message is shown to subscribers.
    """

    channel_id: str = Field(description="Channel identifier (username or chat ID)")
    channel_name: Optional[str] = Field(default=None, description="Human-readable channel title")
    message_id: int = Field(description="Message ID within the channel")
    text: str = Field(default="", description="Plain message text")
    formatted_text: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.now)
    sender_username: Optional[str] = Field(default=None)
    message_link: Optional[str] = Field(default=None)


class NotificationMessage(BaseModel):
    """A notification queued for a subscriber."""

    user_id: int = Field(description="Telegram ID of the subscriber to notify")
    channel_name: str = Field(description="Channel title or identifier")
    message_text: str = Field(description="Plain message text")
    formatted_message_text: Optional[str] = Field(default=None)
    priority: int = Field(default=0)
    sender_username: Optional[str] = Field(default=None)
    message_link: Optional[str] = Field(default=None)
    matched_keywords: list[str] = Field(default_factory=list)
