"""Streaming session errors.

Unlike DomainError (returned inside Result types), these are raised:
they abort a streaming session at a suspension point and must unwind
through the session's cleanup.

Taxonomy:
    SubscribeError        - backplane refused the subscription; raised
                            before any response byte is written
      BackplaneUnavailableError - the backplane cannot be reached
    InitialStateError     - initial-state producer failed or its result
                            could not be encoded
    MessageEncodingError  - a message could not be encoded; fatal for
                            the session
    MessageDecodingError  - raw backplane payload is not valid JSON
    SinkWriteError        - transport refused a write (client gone);
                            treated like cancellation
"""

from sse_bridge.core.enums import ErrorCode
from sse_bridge.core.errors import DomainError


class StreamingError(Exception):
    """Base class for streaming session failures.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message.
        channel: Channel the session was bound to, when known.
    """

    code: ErrorCode = ErrorCode.STREAM_FAILED

    def __init__(self, message: str, *, channel: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.channel = channel

    def to_domain_error(self) -> DomainError:
        """Convert to a DomainError for problem-details rendering.

        Returns:
            DomainError carrying the same code and message.
        """
        details = {"channel": self.channel} if self.channel is not None else None
        return DomainError(code=self.code, message=self.message, details=details)


class SubscribeError(StreamingError):
    """Backplane refused the subscription."""

    code = ErrorCode.STREAM_SUBSCRIBE_FAILED


class BackplaneUnavailableError(SubscribeError):
    """Backplane connection could not be established or was lost."""

    code = ErrorCode.BACKPLANE_UNAVAILABLE


class InitialStateError(StreamingError):
    """Initial-state producer failed or produced an unencodable value."""

    code = ErrorCode.STREAM_INITIAL_STATE_FAILED


class MessageEncodingError(StreamingError):
    """Payload is not JSON serializable."""

    code = ErrorCode.STREAM_MESSAGE_ENCODING_FAILED


class MessageDecodingError(StreamingError):
    """Raw backplane payload is not valid JSON."""

    code = ErrorCode.STREAM_MESSAGE_DECODING_FAILED


class SinkWriteError(StreamingError):
    """Response transport failed while writing or flushing."""

    code = ErrorCode.STREAM_CLIENT_DISCONNECTED
