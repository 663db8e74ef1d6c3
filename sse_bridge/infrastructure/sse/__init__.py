"""SSE infrastructure adapters package.

- ChannelKeys: channel naming conventions
- envelope_codec: JSON encoding and SSE framing
- RedisBackplane: BackplaneProtocol over Redis pub/sub
- InMemoryBackplane: BackplaneProtocol over asyncio queues

Architecture:
    - Implements domain protocols without inheritance (structural typing)
    - Redis pub/sub for horizontal scaling, in-memory for single process
"""

from sse_bridge.infrastructure.sse.channel_keys import ChannelKeys
from sse_bridge.infrastructure.sse.in_memory_backplane import InMemoryBackplane
from sse_bridge.infrastructure.sse.redis_backplane import RedisBackplane

__all__ = [
    "ChannelKeys",
    "InMemoryBackplane",
    "RedisBackplane",
]
