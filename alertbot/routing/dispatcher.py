"""Message dispatcher.

The dispatcher is the glue between the channel client (which reads messages) and the
notification subsystem.

Responsibilities:
- accept an incoming message from a monitored channel
- load subscribers with their keyword specifications
- run the filtering pipeline
- build notifications and hand them to the delivery queue

Storage and delivery are abstracted via `SubscriberRepository` and `NotificationSink`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from alertbot.config.settings import get_settings
from alertbot.domain.entities import ChannelMessage, NotificationMessage, Subscriber
from alertbot.filters.pipeline import (
    ExpressionCache,
    PipelineConfig,
    SubscriberMatch,
    run_pipeline,
)
from alertbot.infra.logging.config import LogContext

logger = logging.getLogger(__name__)


class SubscriberRepository(Protocol):
    """Abstraction over subscriber storage."""

    async def get_all_subscribers(self) -> Sequence[Subscriber]:
        """Return all subscribers with their keyword specifications."""


class NotificationSink(Protocol):
    """Abstraction over the notification delivery queue."""

    async def enqueue(self, notification: NotificationMessage) -> None:
        """Queue a notification for delivery."""


@dataclass(frozen=True)
class DispatchResult:
    message_id: int
    channel_id: str
    subscribers_checked: int
    notifications: list[NotificationMessage] = field(default_factory=list)
    blocked_by_ignore: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0


def _build_notification(message: ChannelMessage, match: SubscriberMatch) -> NotificationMessage:
    return NotificationMessage(
        user_id=match.subscriber.telegram_id,
        channel_name=message.channel_name or message.channel_id,
        message_text=message.text,
        formatted_message_text=message.formatted_text,
        sender_username=message.sender_username,
        message_link=message.message_link,
        matched_keywords=list(match.result.matched_keywords),
    )


class Dispatcher:
    """Orchestrates message processing using the subscriber store and filtering pipeline."""

    def __init__(
        self,
        *,
        subscribers: SubscriberRepository,
        sink: Optional[NotificationSink] = None,
        pipeline_config: Optional[PipelineConfig] = None,
    ):
        self._subscribers = subscribers
        self._sink = sink

        if pipeline_config is None:
            settings = get_settings()
            pipeline_config = PipelineConfig(
                max_message_length=settings.matcher.max_message_length,
                cache_expressions=settings.matcher.cache_expressions,
                expression_cache_size=settings.matcher.expression_cache_size,
            )
        self._pipeline_config = pipeline_config

        # Parsed expressions survive across messages; parsing is pure.
        self._cache = (
            ExpressionCache(max_size=pipeline_config.expression_cache_size)
            if pipeline_config.cache_expressions
            else None
        )

    async def dispatch(self, message: ChannelMessage) -> DispatchResult:
        """Process a single incoming message."""

        with LogContext(message_id=message.message_id, channel_id=message.channel_id):
            subscribers = list(await self._subscribers.get_all_subscribers())

            outcome = run_pipeline(
                text=message.text,
                subscribers=subscribers,
                pipeline_config=self._pipeline_config,
                cache=self._cache,
            )

            notifications: list[NotificationMessage] = []
            sent = 0
            failed = 0

            for match in outcome.matches:
                notification = _build_notification(message, match)
                notifications.append(notification)

                with LogContext(user_id=match.subscriber.telegram_id):
                    logger.debug(f"Match found: {match.result.matched_keywords}")

                    if self._sink is None:
                        continue

                    try:
                        await self._sink.enqueue(notification)
                        sent += 1
                    except Exception:
                        failed += 1
                        logger.exception("Failed to enqueue notification")

            logger.info(
                "Processed message from %s, found %s matches (%s blocked by ignore keywords)",
                message.channel_id,
                len(notifications),
                outcome.blocked_by_ignore,
            )

        return DispatchResult(
            message_id=message.message_id,
            channel_id=message.channel_id,
            subscribers_checked=len(subscribers),
            notifications=notifications,
            blocked_by_ignore=outcome.blocked_by_ignore,
            notifications_sent=sent,
            notifications_failed=failed,
        )
