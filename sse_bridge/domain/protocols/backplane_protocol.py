"""Backplane Protocol for domain layer.

The backplane is the publish/subscribe engine that fans messages out to
every current subscriber of a channel. Streaming sessions consume it;
producers outside this package publish through it.

Architecture:
    - Protocol-based (structural typing, no inheritance)
    - Async operations; every await is a cancellable suspension point
    - One Subscription per subscribe() call, released exactly once

Implementations:
    - RedisBackplane (sse_bridge/infrastructure/sse/redis_backplane.py)
    - InMemoryBackplane (sse_bridge/infrastructure/sse/in_memory_backplane.py)
"""

from typing import Any, Protocol

from sse_bridge.domain.value_objects.subscription import Subscription


class BackplaneProtocol(Protocol):
    """Protocol for the pub/sub substrate behind event streams.

    Example:
        >>> backplane: BackplaneProtocol = get_backplane()
        >>> subscription = await backplane.subscribe("game:abc123")
        >>> try:
        ...     async for message in subscription.messages:
        ...         ...
        ... finally:
        ...     await backplane.unsubscribe(
        ...         subscription.channel, subscription.subscriber_id
        ...     )
    """

    async def subscribe(self, channel: str) -> Subscription:
        """Register interest in a channel.

        Args:
            channel: Channel name.

        Returns:
            Subscription with a lazy message source and an opaque
            subscriber id unique to this call.

        Raises:
            SubscribeError: If the backplane is unreachable or rejects
                the channel. Nothing is left registered in that case.
        """
        ...

    async def unsubscribe(self, channel: str, subscriber_id: str) -> None:
        """Release a subscription.

        Idempotent and best-effort: unknown or already-released ids are
        a no-op.

        Args:
            channel: Channel given to subscribe().
            subscriber_id: Id from the Subscription.
        """
        ...

    async def publish_to_group(self, channel: str, message: Any) -> int:
        """Publish a message to every current subscriber of a channel.

        Args:
            channel: Channel name.
            message: JSON-serializable value (str/bytes are sent as-is by
                serializing backplanes).

        Returns:
            Number of subscribers that received the message.

        Note:
            Fail-open: delivery errors are logged, not raised.
        """
        ...

    async def subscriber_count(self, channel: str) -> int:
        """Count current subscribers of a channel.

        Args:
            channel: Channel name.

        Returns:
            Number of live subscriptions on the channel.
        """
        ...

    async def aclose(self) -> None:
        """Release every subscription and underlying connections."""
        ...
