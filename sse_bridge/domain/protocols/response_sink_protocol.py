"""Response Sink Protocol for domain layer.

The sink is the write side of one live HTTP response. A streaming
session is its only writer for the lifetime of the stream.

Contract:
    - start() commits status and headers, exactly once, before any body
    - write() stages text; nothing reaches the client until flush()
    - flush() sends everything staged since the last flush as one unit,
      so a frame is never left half-written on the client
    - finish() ends the body; no writes are allowed afterwards
    - Transport failures surface as SinkWriteError
"""

from collections.abc import Mapping
from typing import Protocol


class ResponseSinkProtocol(Protocol):
    """Protocol for the write side of an event-stream response."""

    @property
    def started(self) -> bool:
        """Whether headers have been committed."""
        ...

    async def start(self, headers: Mapping[str, str]) -> None:
        """Commit response status and headers.

        Args:
            headers: Response headers.

        Raises:
            SinkWriteError: If the transport is gone.
        """
        ...

    async def write(self, text: str) -> None:
        """Stage text for the next flush.

        Args:
            text: Encoded frame text.
        """
        ...

    async def flush(self) -> None:
        """Send staged text to the client.

        Raises:
            SinkWriteError: If the transport is gone.
        """
        ...

    async def finish(self) -> None:
        """End the response body.

        Raises:
            SinkWriteError: If the transport is gone.
        """
        ...
