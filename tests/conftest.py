"""Shared pytest configuration and fakes.

Fakes implement the domain protocols structurally (no inheritance):
- RecordingLogger: LoggerProtocol that records every call
- RecordingSink: ResponseSinkProtocol that records headers and flushed frames
- FakeBackplane: BackplaneProtocol over a scripted list of messages

Async tests run under pytest-asyncio (asyncio_mode = "auto").
"""

import inspect
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import anyio
import pytest

from sse_bridge.domain.errors import SinkWriteError, SubscribeError
from sse_bridge.domain.value_objects.subscription import Subscription


# =============================================================================
# Logger
# =============================================================================


@dataclass
class LogRecord:
    level: str
    message: str
    context: dict[str, Any]


class RecordingLogger:
    """LoggerProtocol fake; bound children share the parent's records."""

    def __init__(
        self,
        records: list[LogRecord] | None = None,
        bound: dict[str, Any] | None = None,
    ) -> None:
        self.records: list[LogRecord] = records if records is not None else []
        self._bound = bound or {}

    def _log(self, level: str, message: str, context: dict[str, Any]) -> None:
        self.records.append(LogRecord(level, message, {**self._bound, **context}))

    def debug(self, message: str, /, **context: Any) -> None:
        self._log("debug", message, context)

    def info(self, message: str, /, **context: Any) -> None:
        self._log("info", message, context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._log("warning", message, context)

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        if error is not None:
            context["error_type"] = type(error).__name__
        self._log("error", message, context)

    def bind(self, **context: Any) -> "RecordingLogger":
        return RecordingLogger(self.records, {**self._bound, **context})

    def events(self, level: str | None = None) -> list[str]:
        """Message names logged, optionally at one level."""
        return [r.message for r in self.records if level is None or r.level == level]

    def find(self, message: str) -> LogRecord:
        """Last record with the given message."""
        for record in reversed(self.records):
            if record.message == message:
                return record
        raise AssertionError(f"{message!r} not logged; got {self.events()}")


# =============================================================================
# Response sink
# =============================================================================


class RecordingSink:
    """ResponseSinkProtocol fake.

    Args:
        fail_on_flush: Raise SinkWriteError on this flush number (1-based).
    """

    def __init__(self, fail_on_flush: int | None = None) -> None:
        self.headers: dict[str, str] | None = None
        self.start_calls = 0
        self.flushed: list[str] = []
        self.finished = False
        self._pending: list[str] = []
        self._fail_on_flush = fail_on_flush
        self._flush_calls = 0

    @property
    def started(self) -> bool:
        return self.headers is not None

    async def start(self, headers: Mapping[str, str]) -> None:
        self.start_calls += 1
        self.headers = dict(headers)

    async def write(self, text: str) -> None:
        self._pending.append(text)

    async def flush(self) -> None:
        self._flush_calls += 1
        if self._flush_calls == self._fail_on_flush:
            raise SinkWriteError("connection reset by peer")
        self.flushed.append("".join(self._pending))
        self._pending.clear()

    async def finish(self) -> None:
        self.finished = True

    @property
    def body(self) -> str:
        return "".join(self.flushed)


# =============================================================================
# Backplane
# =============================================================================


@dataclass
class FakeBackplane:
    """BackplaneProtocol fake replaying a fixed message list per subscription.

    Attributes:
        messages: Messages every new subscription yields, in order.
        block_after: Keep the source open (wait forever) after the messages.
        source_error: Raised by the source after the messages when set.
        subscribe_error: Raised by subscribe() when set.
        unsubscribe_error: Raised by unsubscribe() when set.
    """

    messages: list[Any] = field(default_factory=list)
    block_after: bool = False
    source_error: Exception | None = None
    subscribe_error: Exception | None = None
    unsubscribe_error: Exception | None = None
    subscribed: list[str] = field(default_factory=list)
    unsubscribed: list[tuple[str, str]] = field(default_factory=list)
    pulled: int = 0
    published: list[tuple[str, Any]] = field(default_factory=list)

    async def subscribe(self, channel: str) -> Subscription:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        subscriber_id = f"sub-{len(self.subscribed) + 1}"
        self.subscribed.append(channel)
        return Subscription(
            channel=channel,
            subscriber_id=subscriber_id,
            messages=self._source(),
        )

    async def _source(self) -> AsyncIterator[Any]:
        for message in self.messages:
            self.pulled += 1
            yield message
        if self.source_error is not None:
            raise self.source_error
        if self.block_after:
            await anyio.sleep_forever()

    async def unsubscribe(self, channel: str, subscriber_id: str) -> None:
        self.unsubscribed.append((channel, subscriber_id))
        if self.unsubscribe_error is not None:
            raise self.unsubscribe_error

    async def publish_to_group(self, channel: str, message: Any) -> int:
        self.published.append((channel, message))
        return 0

    async def subscriber_count(self, channel: str) -> int:
        return self.subscribed.count(channel) - sum(
            1 for c, _ in self.unsubscribed if c == channel
        )

    async def aclose(self) -> None:
        return None

    @property
    def active(self) -> int:
        """Subscriptions not yet released."""
        return len(self.subscribed) - len(self.unsubscribed)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def unavailable_backplane() -> FakeBackplane:
    return FakeBackplane(subscribe_error=SubscribeError("backplane unreachable"))


@pytest.fixture(autouse=True)
def _clear_container_caches():
    """Keep lru_cache singletons from leaking between tests."""
    from sse_bridge.core.config import get_settings
    from sse_bridge.core.container import get_backplane, get_logger, get_state_registry

    yield
    get_settings.cache_clear()
    get_logger.cache_clear()
    get_backplane.cache_clear()
    get_state_registry.cache_clear()


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with fake dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests against a Redis-compatible server"
    )
    config.addinivalue_line("markers", "api: Endpoint tests through the ASGI app")


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)
