"""Event-stream presentation layer.

Exports:
    EventStreamResponse: ASGI response driving a StreamingSession
    ASGIResponseSink: ResponseSinkProtocol over ASGI send
    stream_events: Typed-filtered entry point
    stream_with_initial_state: Typed-with-initial-state entry point
    stream_channel: Untyped entry point
"""

from sse_bridge.presentation.sse.event_stream_response import (
    ASGIResponseSink,
    EventStreamResponse,
)
from sse_bridge.presentation.sse.streams import (
    stream_channel,
    stream_events,
    stream_with_initial_state,
)

__all__ = [
    "ASGIResponseSink",
    "EventStreamResponse",
    "stream_channel",
    "stream_events",
    "stream_with_initial_state",
]
