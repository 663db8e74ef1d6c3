"""Streaming session: one client connection bound to one backplane channel.

The session owns a single Subscription for its whole life and is the only
writer of its response sink.

State machine:
    IDLE -> SUBSCRIBED -> (INITIAL_STATE_SENT) -> STREAMING -> CLOSING -> CLOSED

    open()    IDLE -> SUBSCRIBED, or straight to CLOSED if subscribe fails
              (SubscribeError, nothing written to the sink)
    stream()  commits headers, optionally sends the initial-state frame,
              then forwards messages one frame at a time until the source
              ends, the connection is cancelled, the optional timeout
              fires, a write fails, or encoding fails
    close()   CLOSING -> CLOSED; releases the Subscription exactly once,
              shielded from cancellation; safe to call repeatedly

Cleanup contract:
    Every Subscription created by open() is released by close(), and
    stream() always calls close() before returning or raising.

Backpressure:
    The next message is pulled from the backplane only after the previous
    frame has been flushed, so a slow client only slows its own subscription.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import anyio

from sse_bridge.core.constants import SSE_RESPONSE_HEADERS
from sse_bridge.domain.errors import (
    BackplaneUnavailableError,
    InitialStateError,
    SinkWriteError,
    StreamingError,
    SubscribeError,
)
from sse_bridge.domain.protocols.backplane_protocol import BackplaneProtocol
from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.domain.protocols.response_sink_protocol import ResponseSinkProtocol
from sse_bridge.domain.value_objects.subscription import Subscription
from sse_bridge.infrastructure.sse.channel_keys import ChannelKeys
from sse_bridge.infrastructure.sse.envelope_codec import (
    encode_envelope,
    encode_message,
    format_frame,
    format_retry,
    message_type,
)

InitialStateProducer = Callable[[], Awaitable[Any]]


class SessionState(StrEnum):
    """Lifecycle states of a streaming session."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    INITIAL_STATE_SENT = "initial_state_sent"
    STREAMING = "streaming"
    CLOSING = "closing"
    CLOSED = "closed"


class CloseReason(StrEnum):
    """Why a session reached CLOSED."""

    SOURCE_EXHAUSTED = "source_exhausted"
    """Backplane ended the message source."""

    TIMED_OUT = "timed_out"
    """Configured stream timeout elapsed."""

    CANCELLED = "cancelled"
    """Connection scope was cancelled (client disconnect)."""

    CLIENT_DISCONNECTED = "client_disconnected"
    """Transport refused a write."""

    FAILED = "failed"
    """Subscribe, initial-state or encoding failure."""


@dataclass(frozen=True, slots=True, kw_only=True)
class InitialState:
    """Initial-state frame configuration.

    Attributes:
        event_name: Envelope type tag of the frame.
        producer: Coroutine function returning the state. Runs inside the
            connection's cancel scope, so a disconnect cancels it.
    """

    event_name: str
    producer: InitialStateProducer


class StreamingSession:
    """Per-connection coordinator of subscribe, initial state, loop and cleanup.

    A session runs once. Entry points configure it:
        - typed-filtered: event_type set, no initial_state
        - typed-with-initial-state: initial_state set, no event_type
        - untyped: neither

    Attributes:
        channel: Channel this session subscribes to.
        state: Current SessionState.
        close_reason: CloseReason once CLOSED, else None.
        frames_sent: Number of message frames flushed to the client.

    Example:
        >>> session = StreamingSession(
        ...     backplane=backplane,
        ...     channel=ChannelKeys.channel("game", "abc123"),
        ...     logger=logger,
        ... )
        >>> reason = await session.run(sink)
    """

    def __init__(
        self,
        backplane: BackplaneProtocol,
        channel: str,
        logger: LoggerProtocol,
        *,
        event_type: type | str | None = None,
        initial_state: InitialState | None = None,
        timeout_seconds: float | None = None,
        retry_ms: int | None = None,
    ) -> None:
        """Configure a session.

        Args:
            backplane: Pub/sub engine to subscribe to.
            channel: Channel name.
            logger: Structured logger (channel is bound automatically).
            event_type: Forward only messages whose type tag ("Type" key,
                or class name for typed objects) equals this event's
                short name.
            initial_state: Send one envelope frame before any message.
            timeout_seconds: Close the stream after this long (None = never).
            retry_ms: Send a reconnection hint right after the headers.
        """
        self._backplane = backplane
        self._channel = channel
        self._logger = logger.bind(channel=channel)
        self._event_name = (
            ChannelKeys.event_name(event_type) if event_type is not None else None
        )
        self._initial_state = initial_state
        self._timeout_seconds = timeout_seconds
        self._retry_ms = retry_ms

        self._state = SessionState.IDLE
        self._subscription: Subscription | None = None
        self._close_reason: CloseReason | None = None
        self._frames_sent = 0
        self._frames_skipped = 0

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def close_reason(self) -> CloseReason | None:
        return self._close_reason

    @property
    def frames_sent(self) -> int:
        return self._frames_sent

    async def run(self, sink: ResponseSinkProtocol) -> CloseReason:
        """Open, stream and close in one call.

        Args:
            sink: Response sink to write frames to.

        Returns:
            Why the stream ended (for non-exceptional endings).

        Raises:
            SubscribeError: Before anything is written to the sink.
            StreamingError: Initial-state or encoding failure, after cleanup.
        """
        await self.open()
        return await self.stream(sink)

    async def open(self) -> Subscription:
        """Subscribe to the channel.

        Returns:
            The session's Subscription.

        Raises:
            RuntimeError: If the session was already opened.
            SubscribeError: If the backplane refuses; session is CLOSED.
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"Session already {self._state.value}")

        try:
            subscription = await self._backplane.subscribe(self._channel)
        except SubscribeError as e:
            self._fail_open(e)
            raise
        except Exception as e:
            error = BackplaneUnavailableError(
                f"Subscribe failed: {e}", channel=self._channel
            )
            self._fail_open(error)
            raise error from e

        self._subscription = subscription
        self._state = SessionState.SUBSCRIBED
        self._logger = self._logger.bind(subscriber_id=subscription.subscriber_id)
        self._logger.info("stream_subscribed")
        return subscription

    def _fail_open(self, error: SubscribeError) -> None:
        self._state = SessionState.CLOSED
        self._close_reason = CloseReason.FAILED
        self._logger.warning(
            "stream_subscribe_failed",
            error=error.message,
            error_code=error.code.value,
        )

    async def stream(self, sink: ResponseSinkProtocol) -> CloseReason:
        """Stream frames to the sink until the session ends, then close.

        Args:
            sink: Response sink; headers are committed on entry.

        Returns:
            SOURCE_EXHAUSTED, TIMED_OUT or CLIENT_DISCONNECTED.

        Raises:
            RuntimeError: If the session is not SUBSCRIBED.
            StreamingError: Initial-state or encoding failure (after cleanup).
            Cancellation: Re-raised after cleanup (close_reason CANCELLED).
        """
        if self._state is not SessionState.SUBSCRIBED or self._subscription is None:
            raise RuntimeError(
                f"Session must be subscribed to stream (state: {self._state.value})"
            )

        subscription = self._subscription
        try:
            with anyio.move_on_after(self._timeout_seconds) as deadline:
                await self._pump(sink, subscription)
            if deadline.cancelled_caught:
                self._close_reason = CloseReason.TIMED_OUT
            else:
                self._close_reason = CloseReason.SOURCE_EXHAUSTED

        except anyio.get_cancelled_exc_class():
            self._close_reason = CloseReason.CANCELLED
            raise

        except SinkWriteError as e:
            # Client gone: same as cancellation, not an application error
            self._close_reason = CloseReason.CLIENT_DISCONNECTED
            self._logger.debug("stream_write_failed", error=e.message)

        except StreamingError as e:
            self._close_reason = CloseReason.FAILED
            self._logger.error(
                "stream_failed",
                error=e,
                error_code=e.code.value,
                frames_sent=self._frames_sent,
            )
            raise

        except Exception as e:
            self._close_reason = CloseReason.FAILED
            self._logger.error(
                "stream_failed",
                error=e,
                frames_sent=self._frames_sent,
            )
            raise

        finally:
            await self.close()

        return self._close_reason

    async def _pump(
        self, sink: ResponseSinkProtocol, subscription: Subscription
    ) -> None:
        await sink.start(SSE_RESPONSE_HEADERS)

        if self._retry_ms is not None:
            await sink.write(format_retry(self._retry_ms))
            await sink.flush()

        if self._initial_state is not None:
            await self._send_initial_state(sink, self._initial_state)
            self._state = SessionState.INITIAL_STATE_SENT

        self._state = SessionState.STREAMING

        async for message in subscription.messages:
            if self._event_name is not None and message_type(message) != self._event_name:
                self._frames_skipped += 1
                continue

            await self._emit(sink, format_frame(encode_message(message)))

    async def _send_initial_state(
        self, sink: ResponseSinkProtocol, initial_state: InitialState
    ) -> None:
        try:
            state = await initial_state.producer()
            payload = encode_envelope(initial_state.event_name, state)
        except Exception as e:
            raise InitialStateError(
                f"Initial state '{initial_state.event_name}' failed: {e}",
                channel=self._channel,
            ) from e

        await self._emit(sink, format_frame(payload))

    async def _emit(self, sink: ResponseSinkProtocol, frame: str) -> None:
        await sink.write(frame)
        await sink.flush()
        self._frames_sent += 1

    async def close(self) -> None:
        """Release the Subscription (if any) and mark the session CLOSED.

        Idempotent. Unsubscribe runs shielded from cancellation; a failing
        unsubscribe is logged and swallowed, never retried.
        """
        if self._state is SessionState.CLOSED:
            return

        self._state = SessionState.CLOSING
        subscription, self._subscription = self._subscription, None

        if subscription is not None:
            with anyio.CancelScope(shield=True):
                await self._release(subscription)

        self._state = SessionState.CLOSED
        self._logger.info(
            "stream_closed",
            reason=self._close_reason.value if self._close_reason else None,
            frames_sent=self._frames_sent,
            frames_skipped=self._frames_skipped,
        )

    async def _release(self, subscription: Subscription) -> None:
        aclose = getattr(subscription.messages, "aclose", None)
        if aclose is not None:
            try:
                await aclose()
            except Exception as e:
                self._logger.warning("stream_source_close_failed", error=str(e))

        try:
            await self._backplane.unsubscribe(
                subscription.channel, subscription.subscriber_id
            )
        except Exception as e:
            self._logger.warning(
                "stream_unsubscribe_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
