"""Unit tests for StreamingSession.

Tests cover:
- Forwarding: headers once, source order, unchanged payloads
- Initial state: envelope first, producer/encoding failures
- Typed filtering on the "Type" tag and on typed objects
- Closing triggers: source end, cancellation, timeout, write failure,
  encoding failure
- Cleanup: exactly one unsubscribe per subscribe on every path,
  unsubscribe failures swallowed, idempotent close
- Lifecycle: state transitions, single use, subscribe failure

Architecture:
- FakeBackplane / InMemoryBackplane with RecordingSink (no network)
"""

from dataclasses import dataclass

import anyio
import pytest

from sse_bridge.application.streaming import (
    CloseReason,
    InitialState,
    SessionState,
    StreamingSession,
)
from sse_bridge.core.constants import SSE_RESPONSE_HEADERS
from sse_bridge.core.enums import ErrorCode
from sse_bridge.domain.errors import (
    BackplaneUnavailableError,
    InitialStateError,
    MessageEncodingError,
    SubscribeError,
)
from sse_bridge.infrastructure.sse.in_memory_backplane import InMemoryBackplane
from tests.conftest import FakeBackplane, RecordingSink


@dataclass
class Moved:
    """Event class used for typed filtering."""

    to: str = ""


@dataclass
class Chat:
    text: str = ""


async def wait_for(predicate, timeout: float = 1.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.001)


# =============================================================================
# End-to-end Scenarios
# =============================================================================


@pytest.mark.unit
class TestScenarios:
    """Reference scenarios over the in-memory backplane."""

    async def test_untyped_stream_forwards_published_message(self, logger, sink):
        """Subscribe, publish {"x":1}, close channel -> one frame, released."""
        backplane = InMemoryBackplane(logger=logger)
        session = StreamingSession(backplane, "game:abc123", logger)

        await session.open()
        assert await backplane.publish_to_group("game:abc123", {"x": 1}) == 1
        await backplane.close_channel("game:abc123")
        reason = await session.stream(sink)

        assert reason is CloseReason.SOURCE_EXHAUSTED
        assert sink.body == 'data: {"x":1}\n\n'
        assert await backplane.subscriber_count("game:abc123") == 0

    async def test_initial_state_frame_precedes_messages(self, logger, sink):
        """game_state initial state {"score":0} is always the first frame."""
        backplane = InMemoryBackplane(logger=logger)

        async def load_state():
            return {"score": 0}

        session = StreamingSession(
            backplane,
            "game:abc123",
            logger,
            initial_state=InitialState(event_name="game_state", producer=load_state),
        )

        await session.open()
        await backplane.publish_to_group("game:abc123", {"x": 1})
        await backplane.close_channel("game:abc123")
        await session.stream(sink)

        assert sink.flushed == [
            'data: {"Type":"game_state","Data":{"score":0}}\n\n',
            'data: {"x":1}\n\n',
        ]
        assert await backplane.subscriber_count("game:abc123") == 0


# =============================================================================
# Forwarding Tests
# =============================================================================


@pytest.mark.unit
class TestForwarding:
    """Test the message loop."""

    async def test_headers_committed_once_before_frames(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}, {"x": 2}])

        await StreamingSession(backplane, "game:abc123", logger).run(sink)

        assert sink.start_calls == 1
        assert sink.headers == SSE_RESPONSE_HEADERS
        assert sink.headers["Content-Type"] == "text/event-stream; charset=utf-8"

    async def test_frames_follow_source_order(self, logger, sink):
        backplane = FakeBackplane(messages=[{"n": n} for n in range(5)])

        session = StreamingSession(backplane, "game:abc123", logger)
        await session.run(sink)

        assert sink.flushed == [f'data: {{"n":{n}}}\n\n' for n in range(5)]
        assert session.frames_sent == 5

    async def test_one_flush_per_frame(self, logger, sink):
        """Test every frame is flushed as its own unit."""
        backplane = FakeBackplane(messages=["a", "b"])

        await StreamingSession(backplane, "game:abc123", logger).run(sink)

        assert sink.flushed == ['data: "a"\n\n', 'data: "b"\n\n']

    async def test_empty_source_sends_headers_only(self, logger, sink):
        backplane = FakeBackplane(messages=[])

        reason = await StreamingSession(backplane, "game:abc123", logger).run(sink)

        assert reason is CloseReason.SOURCE_EXHAUSTED
        assert sink.started
        assert sink.flushed == []

    async def test_next_message_pulled_only_after_flush(self, logger):
        """Test backpressure: message k+1 is not pulled before frame k flushed."""
        backplane = FakeBackplane(messages=[1, 2, 3])
        pulled_at_flush: list[int] = []

        class ObservingSink(RecordingSink):
            async def flush(self) -> None:
                pulled_at_flush.append(backplane.pulled)
                await super().flush()

        await StreamingSession(backplane, "game:abc123", logger).run(ObservingSink())

        assert pulled_at_flush == [1, 2, 3]

    async def test_retry_hint_written_after_headers(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}])

        session = StreamingSession(backplane, "game:abc123", logger, retry_ms=3000)
        await session.run(sink)

        assert sink.flushed == ["retry: 3000\n\n", 'data: {"x":1}\n\n']
        assert session.frames_sent == 1


# =============================================================================
# Typed Filtering Tests
# =============================================================================


@pytest.mark.unit
class TestTypedFiltering:
    """Test event_type filtering."""

    async def test_only_matching_type_is_forwarded_unchanged(self, logger, sink):
        moved = {"Type": "Moved", "Data": {"to": "e4"}}
        backplane = FakeBackplane(
            messages=[moved, {"Type": "Chat", "Data": "hi"}, {"x": 1}, "Moved"]
        )

        session = StreamingSession(
            backplane, "game:abc123", logger, event_type=Moved
        )
        await session.run(sink)

        assert sink.flushed == ['data: {"Type":"Moved","Data":{"to":"e4"}}\n\n']
        assert session.frames_sent == 1

    async def test_event_type_accepts_name_string(self, logger, sink):
        backplane = FakeBackplane(
            messages=[{"Type": "Chat", "Data": 1}, {"Type": "Moved", "Data": 2}]
        )

        await StreamingSession(
            backplane, "game:abc123", logger, event_type="Chat"
        ).run(sink)

        assert sink.body == 'data: {"Type":"Chat","Data":1}\n\n'

    async def test_typed_objects_from_in_memory_backplane(self, logger, sink):
        """Objects published in-process match on their class."""
        backplane = InMemoryBackplane(logger=logger)
        session = StreamingSession(
            backplane, "game:abc123", logger, event_type=Moved
        )

        await session.open()
        await backplane.publish_to_group("game:abc123", Moved(to="e4"))
        await backplane.publish_to_group("game:abc123", Chat(text="hi"))
        await backplane.publish_to_group("game:abc123", {"Type": "Moved", "Data": 1})
        await backplane.close_channel("game:abc123")
        await session.stream(sink)

        assert sink.flushed == [
            'data: {"to":"e4"}\n\n',
            'data: {"Type":"Moved","Data":1}\n\n',
        ]
        assert await backplane.subscriber_count("game:abc123") == 0

    async def test_unfiltered_session_forwards_everything(self, logger, sink):
        backplane = FakeBackplane(messages=[{"Type": "Chat"}, {"x": 1}])

        await StreamingSession(backplane, "game:abc123", logger).run(sink)

        assert len(sink.flushed) == 2


# =============================================================================
# Initial State Tests
# =============================================================================


@pytest.mark.unit
class TestInitialState:
    """Test initial-state handling."""

    async def test_producer_failure_raises_and_releases(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}])

        async def broken():
            raise RuntimeError("store offline")

        session = StreamingSession(
            backplane,
            "game:abc123",
            logger,
            initial_state=InitialState(event_name="game_state", producer=broken),
        )

        with pytest.raises(InitialStateError) as exc_info:
            await session.run(sink)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert sink.started
        assert sink.flushed == []
        assert backplane.active == 0
        assert session.close_reason is CloseReason.FAILED
        assert backplane.pulled == 0

    async def test_unencodable_state_raises_initial_state_error(self, logger, sink):
        backplane = FakeBackplane()

        async def opaque():
            return object()

        session = StreamingSession(
            backplane,
            "game:abc123",
            logger,
            initial_state=InitialState(event_name="game_state", producer=opaque),
        )

        with pytest.raises(InitialStateError):
            await session.run(sink)

        assert sink.flushed == []
        assert backplane.active == 0

    async def test_cancelled_producer_still_releases(self, logger, sink):
        backplane = FakeBackplane()
        producer_started = anyio.Event()

        async def slow():
            producer_started.set()
            await anyio.sleep_forever()

        session = StreamingSession(
            backplane,
            "game:abc123",
            logger,
            initial_state=InitialState(event_name="game_state", producer=slow),
        )

        async with anyio.create_task_group() as task_group:
            task_group.start_soon(session.run, sink)
            await producer_started.wait()
            task_group.cancel_scope.cancel()

        assert session.close_reason is CloseReason.CANCELLED
        assert backplane.unsubscribed == [("game:abc123", "sub-1")]


# =============================================================================
# Closing Trigger Tests
# =============================================================================


@pytest.mark.unit
class TestClosingTriggers:
    """Test every way a session ends."""

    async def test_cancellation_after_frames_releases_subscription(
        self, logger, sink
    ):
        backplane = FakeBackplane(messages=[{"n": 1}, {"n": 2}], block_after=True)
        session = StreamingSession(backplane, "game:abc123", logger)

        async with anyio.create_task_group() as task_group:
            task_group.start_soon(session.run, sink)
            await wait_for(lambda: len(sink.flushed) == 2)
            task_group.cancel_scope.cancel()

        assert session.state is SessionState.CLOSED
        assert session.close_reason is CloseReason.CANCELLED
        assert backplane.unsubscribed == [("game:abc123", "sub-1")]
        assert sink.flushed == ['data: {"n":1}\n\n', 'data: {"n":2}\n\n']

    async def test_timeout_closes_stream(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}], block_after=True)
        session = StreamingSession(
            backplane, "game:abc123", logger, timeout_seconds=0.05
        )

        reason = await session.run(sink)

        assert reason is CloseReason.TIMED_OUT
        assert sink.body == 'data: {"x":1}\n\n'
        assert backplane.active == 0

    async def test_write_failure_is_client_disconnect(self, logger):
        backplane = FakeBackplane(messages=[{"n": 1}, {"n": 2}, {"n": 3}])
        sink = RecordingSink(fail_on_flush=2)
        session = StreamingSession(backplane, "game:abc123", logger)

        reason = await session.run(sink)

        assert reason is CloseReason.CLIENT_DISCONNECTED
        assert sink.flushed == ['data: {"n":1}\n\n']
        assert backplane.active == 0
        assert "stream_write_failed" in logger.events("debug")
        assert logger.events("error") == []

    async def test_encoding_failure_keeps_prior_frames(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}, {"bad": object()}, {"x": 2}])
        session = StreamingSession(backplane, "game:abc123", logger)

        with pytest.raises(MessageEncodingError):
            await session.run(sink)

        assert sink.flushed == ['data: {"x":1}\n\n']
        assert backplane.pulled == 2
        assert backplane.active == 0
        assert session.close_reason is CloseReason.FAILED
        assert logger.find("stream_failed").level == "error"

    async def test_non_finite_number_aborts_stream(self, logger, sink):
        """NaN has no JSON form; no frame carries it."""
        backplane = FakeBackplane(messages=[{"x": 1}, {"x": float("nan")}, {"x": 2}])
        session = StreamingSession(backplane, "game:abc123", logger)

        with pytest.raises(MessageEncodingError):
            await session.run(sink)

        assert sink.flushed == ['data: {"x":1}\n\n']
        assert "NaN" not in sink.body
        assert backplane.active == 0
        assert session.close_reason is CloseReason.FAILED


# =============================================================================
# Subscribe Failure Tests
# =============================================================================


@pytest.mark.unit
class TestSubscribeFailure:
    """Test behavior when the backplane refuses the subscription."""

    async def test_subscribe_error_before_any_output(
        self, logger, sink, unavailable_backplane
    ):
        session = StreamingSession(unavailable_backplane, "game:abc123", logger)

        with pytest.raises(SubscribeError):
            await session.run(sink)

        assert not sink.started
        assert session.state is SessionState.CLOSED
        assert session.close_reason is CloseReason.FAILED
        assert unavailable_backplane.unsubscribed == []

    async def test_unexpected_subscribe_exception_is_wrapped(self, logger, sink):
        backplane = FakeBackplane(subscribe_error=ConnectionError("refused"))
        session = StreamingSession(backplane, "game:abc123", logger)

        with pytest.raises(BackplaneUnavailableError) as exc_info:
            await session.open()

        assert isinstance(exc_info.value, SubscribeError)
        assert exc_info.value.code is ErrorCode.BACKPLANE_UNAVAILABLE
        assert exc_info.value.channel == "game:abc123"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert "stream_subscribe_failed" in logger.events("warning")


# =============================================================================
# Cleanup & Lifecycle Tests
# =============================================================================


@pytest.mark.unit
class TestLifecycle:
    """Test cleanup guarantees and state transitions."""

    async def test_unsubscribe_failure_is_logged_and_swallowed(self, logger, sink):
        backplane = FakeBackplane(
            messages=[{"x": 1}], unsubscribe_error=RuntimeError("redis gone")
        )

        reason = await StreamingSession(backplane, "game:abc123", logger).run(sink)

        assert reason is CloseReason.SOURCE_EXHAUSTED
        assert len(backplane.unsubscribed) == 1
        record = logger.find("stream_unsubscribe_failed")
        assert record.level == "warning"
        assert record.context["error_type"] == "RuntimeError"

    async def test_close_is_idempotent(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}])
        session = StreamingSession(backplane, "game:abc123", logger)

        await session.run(sink)
        await session.close()
        await session.close()

        assert len(backplane.unsubscribed) == 1

    async def test_close_after_open_without_stream_releases(self, logger):
        backplane = FakeBackplane()
        session = StreamingSession(backplane, "game:abc123", logger)

        subscription = await session.open()
        await session.close()

        assert backplane.unsubscribed == [("game:abc123", subscription.subscriber_id)]
        assert session.state is SessionState.CLOSED

    async def test_close_before_open_needs_no_release(self, logger):
        backplane = FakeBackplane()
        session = StreamingSession(backplane, "game:abc123", logger)

        await session.close()

        assert session.state is SessionState.CLOSED
        assert backplane.subscribed == []
        with pytest.raises(RuntimeError):
            await session.open()

    async def test_session_cannot_be_run_twice(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}])
        session = StreamingSession(backplane, "game:abc123", logger)

        await session.run(sink)

        with pytest.raises(RuntimeError):
            await session.run(RecordingSink())
        assert len(backplane.subscribed) == 1

    async def test_stream_requires_open(self, logger, sink):
        session = StreamingSession(FakeBackplane(), "game:abc123", logger)

        with pytest.raises(RuntimeError):
            await session.stream(sink)

        assert session.state is SessionState.IDLE

    async def test_states_through_successful_run(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}])
        session = StreamingSession(backplane, "game:abc123", logger)
        assert session.state is SessionState.IDLE

        await session.open()
        assert session.state is SessionState.SUBSCRIBED

        await session.stream(sink)
        assert session.state is SessionState.CLOSED

    async def test_closed_log_carries_reason_and_counts(self, logger, sink):
        backplane = FakeBackplane(messages=[{"x": 1}, {"x": 2}])

        await StreamingSession(backplane, "game:abc123", logger).run(sink)

        record = logger.find("stream_closed")
        assert record.context["reason"] == "source_exhausted"
        assert record.context["frames_sent"] == 2
        assert record.context["channel"] == "game:abc123"
        assert record.context["subscriber_id"] == "sub-1"

    async def test_many_sessions_leave_no_subscriptions(self, logger):
        backplane = FakeBackplane(messages=[{"x": 1}], block_after=True)

        async with anyio.create_task_group() as task_group:
            sinks = [RecordingSink() for _ in range(20)]
            for sink in sinks:
                task_group.start_soon(
                    StreamingSession(backplane, "game:abc123", logger).run, sink
                )
            await wait_for(lambda: all(s.flushed for s in sinks))
            task_group.cancel_scope.cancel()

        assert len(backplane.subscribed) == 20
        assert backplane.active == 0
