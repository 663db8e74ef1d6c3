"""In-memory backplane implementation.

Implements BackplaneProtocol with one asyncio queue per subscriber.
Suitable for single-process deployments and tests. For multiple API
instances, use RedisBackplane.

Architecture:
    - Implements BackplaneProtocol (hexagonal adapter pattern)
    - Dictionary-based registry (channel -> subscriber id -> queue)
    - FIFO per subscriber: messages arrive in publish order
    - Messages are passed as Python objects (no serialization)

Thread Safety:
    - NOT thread-safe (single event loop design)
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from uuid_extensions import uuid7

from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.domain.value_objects.subscription import Subscription

# Queued after the last message to end a subscriber's source.
_CHANNEL_CLOSED = object()


class InMemoryBackplane:
    """In-memory pub/sub with per-subscriber queues.

    Bounded queues (max_queue_size > 0) drop messages for a subscriber that
    falls behind, with a warning; other subscribers are unaffected.

    Attributes:
        _channels: Channel -> subscriber id -> queue.
        _max_queue_size: Per-subscriber bound (0 = unbounded).
        _logger: Logger instance.

    Example:
        >>> backplane = InMemoryBackplane(logger=logger)
        >>> subscription = await backplane.subscribe("game:abc123")
        >>> await backplane.publish_to_group("game:abc123", {"x": 1})
        1
    """

    def __init__(self, logger: LoggerProtocol, max_queue_size: int = 0) -> None:
        """Initialize the backplane.

        Args:
            logger: Structured logger.
            max_queue_size: Per-subscriber queue bound (0 = unbounded).
        """
        self._channels: dict[str, dict[str, asyncio.Queue[Any]]] = {}
        self._max_queue_size = max_queue_size
        self._logger = logger

    async def subscribe(self, channel: str) -> Subscription:
        """Register a new subscriber queue on a channel.

        Args:
            channel: Channel name.

        Returns:
            Subscription draining the subscriber's queue.
        """
        subscriber_id = str(uuid7())
        # Unbounded so the end marker always fits; the bound is enforced on publish
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._channels.setdefault(channel, {})[subscriber_id] = queue

        self._logger.debug(
            "backplane_subscribed",
            channel=channel,
            subscriber_id=subscriber_id,
        )

        return Subscription(
            channel=channel,
            subscriber_id=subscriber_id,
            messages=self._drain(queue),
        )

    async def _drain(self, queue: asyncio.Queue[Any]) -> AsyncIterator[Any]:
        while True:
            message = await queue.get()
            if message is _CHANNEL_CLOSED:
                return
            yield message

    async def unsubscribe(self, channel: str, subscriber_id: str) -> None:
        """Remove a subscriber queue. Unknown ids are a no-op.

        Args:
            channel: Channel given to subscribe().
            subscriber_id: Id from the Subscription.
        """
        subscribers = self._channels.get(channel)
        if subscribers is None or subscribers.pop(subscriber_id, None) is None:
            return

        if not subscribers:
            del self._channels[channel]

        self._logger.debug(
            "backplane_unsubscribed",
            channel=channel,
            subscriber_id=subscriber_id,
        )

    async def publish_to_group(self, channel: str, message: Any) -> int:
        """Enqueue a message for every current subscriber of a channel.

        Args:
            channel: Channel name.
            message: Any value; encoding happens in the streaming session.

        Returns:
            Number of subscribers the message was queued for.
        """
        delivered = 0
        for subscriber_id, queue in list(self._channels.get(channel, {}).items()):
            if self._max_queue_size and queue.qsize() >= self._max_queue_size:
                self._logger.warning(
                    "backplane_message_dropped",
                    channel=channel,
                    subscriber_id=subscriber_id,
                    reason="queue_full",
                )
                continue
            queue.put_nowait(message)
            delivered += 1
        return delivered

    async def close_channel(self, channel: str) -> None:
        """End the message source of every subscriber on a channel.

        Queued messages are still delivered before the source ends.
        Subscriptions stay registered until their owners unsubscribe.

        Args:
            channel: Channel name.
        """
        for queue in self._channels.get(channel, {}).values():
            queue.put_nowait(_CHANNEL_CLOSED)

    async def subscriber_count(self, channel: str) -> int:
        """Count current subscribers of a channel.

        Args:
            channel: Channel name.

        Returns:
            Number of registered subscriber queues.
        """
        return len(self._channels.get(channel, {}))

    async def aclose(self) -> None:
        """End every message source on every channel."""
        for channel in list(self._channels):
            await self.close_channel(channel)
