"""Redis backplane implementing BackplaneProtocol.

Each subscription gets its own Redis pub/sub connection so that one slow
or cancelled stream never affects another. Messages are JSON-decoded on
the way in and serialized as compact JSON on the way out.

Architecture:
    - Implements BackplaneProtocol without inheritance (structural typing)
    - Uses Redis pub/sub for horizontal scaling (multiple API instances)
    - Async generator message source per subscription
    - Fail-open publish: errors are logged, not raised
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import anyio
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from uuid_extensions import uuid7

from sse_bridge.core.constants import JSON_SEPARATORS
from sse_bridge.domain.errors import (
    BackplaneUnavailableError,
    MessageDecodingError,
    SubscribeError,
)
from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.domain.value_objects.subscription import Subscription
from sse_bridge.infrastructure.sse.envelope_codec import decode_message


class RedisBackplane:
    """Redis implementation of BackplaneProtocol.

    Note: Does NOT inherit from BackplaneProtocol (uses structural typing).

    Attributes:
        _redis: Async Redis client instance.
        _pubsubs: Live pub/sub connections keyed by subscriber id.
        _logger: Logger instance.
    """

    def __init__(
        self,
        redis_client: "Redis[bytes]",  # type: ignore[type-arg]
        logger: LoggerProtocol,
    ) -> None:
        """Initialize Redis backplane.

        Args:
            redis_client: Async Redis client instance.
            logger: Structured logger.
        """
        self._redis = redis_client
        self._pubsubs: dict[str, PubSub] = {}
        self._logger = logger

    async def subscribe(self, channel: str) -> Subscription:
        """Subscribe to a channel on a dedicated pub/sub connection.

        Args:
            channel: Channel name.

        Returns:
            Subscription whose messages are decoded JSON values.

        Raises:
            BackplaneUnavailableError: If Redis cannot be reached.
            SubscribeError: If Redis rejects the subscription.
        """
        pubsub: PubSub = self._redis.pubsub(ignore_subscribe_messages=True)

        try:
            await pubsub.subscribe(channel)
        except (RedisConnectionError, RedisTimeoutError) as e:
            with anyio.CancelScope(shield=True):
                await self._close_pubsub(pubsub)
            raise BackplaneUnavailableError(
                f"Redis unreachable: {e}", channel=channel
            ) from e
        except RedisError as e:
            with anyio.CancelScope(shield=True):
                await self._close_pubsub(pubsub)
            raise SubscribeError(
                f"Redis subscribe failed: {e}", channel=channel
            ) from e
        except anyio.get_cancelled_exc_class():
            # Cancelled mid-subscribe: nothing may stay registered
            with anyio.CancelScope(shield=True):
                await self._close_pubsub(pubsub)
            raise

        subscriber_id = str(uuid7())
        self._pubsubs[subscriber_id] = pubsub

        self._logger.debug(
            "backplane_subscribed",
            channel=channel,
            subscriber_id=subscriber_id,
        )

        return Subscription(
            channel=channel,
            subscriber_id=subscriber_id,
            messages=self._listen(pubsub, channel),
        )

    async def _listen(self, pubsub: PubSub, channel: str) -> AsyncIterator[Any]:
        """Yield decoded messages until the connection is unsubscribed or lost.

        Malformed payloads are skipped. A Redis error ends the source; the
        owning session then closes as if the channel had been closed.
        """
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue

                try:
                    yield decode_message(message["data"])
                except MessageDecodingError as e:
                    self._logger.warning(
                        "backplane_message_dropped",
                        channel=channel,
                        error=str(e),
                    )
        except RedisError as e:
            self._logger.error(
                "backplane_listen_failed",
                error=e,
                channel=channel,
            )

    async def unsubscribe(self, channel: str, subscriber_id: str) -> None:
        """Release a subscription and its pub/sub connection.

        Unknown ids are ignored, so a second call is a no-op.

        Args:
            channel: Channel given to subscribe().
            subscriber_id: Id from the Subscription.

        Raises:
            RedisError: If Redis fails while unsubscribing. The connection
                is closed regardless.
        """
        pubsub = self._pubsubs.pop(subscriber_id, None)
        if pubsub is None:
            return

        try:
            await pubsub.unsubscribe(channel)
        finally:
            await self._close_pubsub(pubsub)

        self._logger.debug(
            "backplane_unsubscribed",
            channel=channel,
            subscriber_id=subscriber_id,
        )

    async def publish_to_group(self, channel: str, message: Any) -> int:
        """Publish to every subscriber of a channel.

        Args:
            channel: Channel name.
            message: JSON-serializable value; str/bytes are sent unchanged.

        Returns:
            Number of Redis subscribers that received the message (0 on error).
        """
        try:
            if isinstance(message, (str, bytes)):
                payload = message
            else:
                payload = json.dumps(
                    message, separators=JSON_SEPARATORS, allow_nan=False
                )

            receivers: int = await self._redis.publish(channel, payload)

            self._logger.debug(
                "backplane_published",
                channel=channel,
                receivers=receivers,
            )
            return receivers

        except RedisError as e:
            # Fail-open: log error but don't raise
            self._logger.warning(
                "backplane_publish_failed",
                channel=channel,
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0
        except (TypeError, ValueError) as e:
            self._logger.error(
                "backplane_publish_unserializable",
                error=e,
                channel=channel,
            )
            return 0

    async def subscriber_count(self, channel: str) -> int:
        """Count subscribers of a channel across all Redis clients.

        Args:
            channel: Channel name.

        Returns:
            Result of PUBSUB NUMSUB for the channel.
        """
        counts = await self._redis.pubsub_numsub(channel)
        return sum(count for _, count in counts)

    async def aclose(self) -> None:
        """Close every live pub/sub connection and the Redis client."""
        pubsubs = list(self._pubsubs.values())
        self._pubsubs.clear()
        for pubsub in pubsubs:
            await self._close_pubsub(pubsub)
        await self._redis.aclose()

    async def _close_pubsub(self, pubsub: PubSub) -> None:
        try:
            await pubsub.aclose()  # type: ignore[no-untyped-call]
        except RedisError as e:
            self._logger.warning(
                "backplane_connection_close_failed",
                error=str(e),
            )
