"""Event-stream entry points.

Each entry point builds a StreamingSession for one connection and wraps
it in an EventStreamResponse. Route handlers return the result directly.

Entry points:
    stream_events             typed-filtered: only messages whose "Type"
                              tag is the event's short name
    stream_with_initial_state initial-state envelope first, then every
                              message
    stream_channel            every message, unfiltered

Usage:
    @router.get("/games/{game_id}/moves")
    async def moves(game_id: str, backplane: BackplaneDep) -> Response:
        return stream_events(
            backplane, ChannelKeys.channel("game", game_id), MoveMade
        )
"""

from sse_bridge.application.streaming import InitialState, StreamingSession
from sse_bridge.application.streaming.session import InitialStateProducer
from sse_bridge.core.container import get_logger
from sse_bridge.domain.protocols.backplane_protocol import BackplaneProtocol
from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.presentation.sse.event_stream_response import EventStreamResponse


def stream_events(
    backplane: BackplaneProtocol,
    channel: str,
    event_type: type | str,
    *,
    logger: LoggerProtocol | None = None,
    timeout_seconds: float | None = None,
    retry_ms: int | None = None,
) -> EventStreamResponse:
    """Stream only messages tagged with the given event type.

    Matching messages are forwarded unchanged.

    Args:
        backplane: Pub/sub engine.
        channel: Channel name.
        event_type: Event class (its ``__name__`` is the tag) or tag string.
        logger: Logger (defaults to the application logger).
        timeout_seconds: Optional stream lifetime.
        retry_ms: Optional reconnection hint.

    Returns:
        Response that runs the session when called.
    """
    session = StreamingSession(
        backplane,
        channel,
        logger or get_logger(),
        event_type=event_type,
        timeout_seconds=timeout_seconds,
        retry_ms=retry_ms,
    )
    return EventStreamResponse(session)


def stream_with_initial_state(
    backplane: BackplaneProtocol,
    channel: str,
    event_name: str,
    initial_state: InitialStateProducer,
    *,
    logger: LoggerProtocol | None = None,
    timeout_seconds: float | None = None,
    retry_ms: int | None = None,
) -> EventStreamResponse:
    """Send ``{"Type": event_name, "Data": <state>}`` first, then every message.

    Args:
        backplane: Pub/sub engine.
        channel: Channel name.
        event_name: Type tag of the initial-state envelope.
        initial_state: Coroutine function producing the current state.
        logger: Logger (defaults to the application logger).
        timeout_seconds: Optional stream lifetime.
        retry_ms: Optional reconnection hint.

    Returns:
        Response that runs the session when called.
    """
    session = StreamingSession(
        backplane,
        channel,
        logger or get_logger(),
        initial_state=InitialState(event_name=event_name, producer=initial_state),
        timeout_seconds=timeout_seconds,
        retry_ms=retry_ms,
    )
    return EventStreamResponse(session)


def stream_channel(
    backplane: BackplaneProtocol,
    channel: str,
    *,
    logger: LoggerProtocol | None = None,
    timeout_seconds: float | None = None,
    retry_ms: int | None = None,
) -> EventStreamResponse:
    """Forward every message published on the channel."""
    session = StreamingSession(
        backplane,
        channel,
        logger or get_logger(),
        timeout_seconds=timeout_seconds,
        retry_ms=retry_ms,
    )
    return EventStreamResponse(session)
