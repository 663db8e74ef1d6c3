"""Domain errors package.

Usage:
    from sse_bridge.domain.errors import StreamingError, SubscribeError
"""

from sse_bridge.domain.errors.streaming_error import (
    BackplaneUnavailableError,
    InitialStateError,
    MessageDecodingError,
    MessageEncodingError,
    SinkWriteError,
    StreamingError,
    SubscribeError,
)

__all__ = [
    "BackplaneUnavailableError",
    "InitialStateError",
    "MessageDecodingError",
    "MessageEncodingError",
    "SinkWriteError",
    "StreamingError",
    "SubscribeError",
]
