"""Backplane dependency factories.

Application-scoped singletons for event streaming:
- get_backplane(): pub/sub engine selected by settings.backplane
- get_state_registry(): initial-state providers

Every open stream holds its own subscription on the shared backplane;
the backplane itself is created once per process.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from sse_bridge.core.config import get_settings
from sse_bridge.core.container.infrastructure import get_logger
from sse_bridge.core.enums import BackplaneKind

if TYPE_CHECKING:
    from sse_bridge.application.streaming.state_registry import StateProviderRegistry
    from sse_bridge.domain.protocols.backplane_protocol import BackplaneProtocol


@lru_cache()
def get_backplane() -> "BackplaneProtocol":
    """Get backplane singleton (app-scoped).

    Returns:
        RedisBackplane with a dedicated connection pool, or
        InMemoryBackplane for single-process deployments.

    Usage:
        # Presentation Layer (FastAPI Depends)
        backplane: BackplaneProtocol = Depends(get_backplane)

        # Anywhere else (publishing)
        await get_backplane().publish_to_group(channel, message)
    """
    settings = get_settings()

    if settings.backplane is BackplaneKind.MEMORY:
        from sse_bridge.infrastructure.sse.in_memory_backplane import (
            InMemoryBackplane,
        )

        return InMemoryBackplane(
            logger=get_logger(),
            max_queue_size=settings.sse_subscriber_queue_size,
        )

    from redis.asyncio import ConnectionPool, Redis

    from sse_bridge.infrastructure.sse.redis_backplane import RedisBackplane

    # Pub/sub connections block on read, so no socket_timeout here
    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=False,
        socket_connect_timeout=5,
        socket_keepalive=True,
    )
    redis_client: Redis[bytes] = Redis.from_pool(pool)  # type: ignore[type-arg]

    return RedisBackplane(redis_client=redis_client, logger=get_logger())


@lru_cache()
def get_state_registry() -> "StateProviderRegistry":
    """Get initial-state provider registry singleton (app-scoped).

    Usage:
        get_state_registry().register("game", "game_state", load_game_state)
    """
    from sse_bridge.application.streaming.state_registry import (
        StateProviderRegistry,
    )

    return StateProviderRegistry()
