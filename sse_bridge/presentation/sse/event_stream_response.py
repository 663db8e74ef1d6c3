"""ASGI response that drives a StreamingSession.

Replaces StreamingResponse for event streams: the session, not an async
generator, decides what is written and when, and subscribe failures can
still be answered with a regular error response because nothing has been
sent yet.

Lifecycle per request:
    1. session.open(); on SubscribeError answer 503 problem details
    2. run session.stream() next to a disconnect listener in one task
       group; whichever finishes first cancels the other
    3. end the body unless the client is already gone; failures after
       the headers (already logged by the session) still end it
    4. session.close() on every path
"""

from collections.abc import Mapping

import anyio
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from sse_bridge.application.streaming import CloseReason, StreamingSession
from sse_bridge.core.constants import SSE_MEDIA_TYPE, SSE_RESPONSE_HEADERS
from sse_bridge.domain.errors import SinkWriteError, SubscribeError
from sse_bridge.presentation.routers.api.v1.errors.error_response_builder import (
    ErrorResponseBuilder,
)


class ASGIResponseSink:
    """ResponseSinkProtocol over an ASGI send callable.

    Writes are staged and sent as one ``http.response.body`` message per
    flush. Transport OSErrors become SinkWriteError.
    """

    def __init__(self, send: Send, status_code: int = 200) -> None:
        self._send = send
        self._status_code = status_code
        self._buffer: list[str] = []
        self._started = False
        self._finished = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def finished(self) -> bool:
        return self._finished

    async def start(self, headers: Mapping[str, str]) -> None:
        if self._started:
            raise RuntimeError("Response already started")

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers.items()
        ]
        await self._send_message(
            {
                "type": "http.response.start",
                "status": self._status_code,
                "headers": raw_headers,
            }
        )
        self._started = True

    async def write(self, text: str) -> None:
        if self._finished:
            raise RuntimeError("Response already finished")
        self._buffer.append(text)

    async def flush(self) -> None:
        if not self._buffer:
            return

        body = "".join(self._buffer).encode("utf-8")
        self._buffer.clear()
        await self._send_message(
            {"type": "http.response.body", "body": body, "more_body": True}
        )

    async def finish(self) -> None:
        if self._finished:
            return

        await self.flush()
        await self._send_message(
            {"type": "http.response.body", "body": b"", "more_body": False}
        )
        self._finished = True

    async def _send_message(self, message: Message) -> None:
        try:
            await self._send(message)
        except OSError as e:
            raise SinkWriteError(f"Client connection lost: {e}") from e


class EventStreamResponse(Response):
    """Starlette response running one StreamingSession to completion.

    Attributes:
        session: Session bound to this request.
    """

    media_type = SSE_MEDIA_TYPE

    def __init__(self, session: StreamingSession) -> None:
        self.session = session
        self.status_code = 200
        self.background = None
        self.init_headers(SSE_RESPONSE_HEADERS)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.session.open()
        except SubscribeError as e:
            response = ErrorResponseBuilder.from_domain_error(
                e.to_domain_error(), instance=scope.get("path", "")
            )
            await response(scope, receive, send)
            return

        sink = ASGIResponseSink(send, status_code=self.status_code)
        disconnected = False

        try:
            async with anyio.create_task_group() as task_group:

                async def stream_and_cancel() -> None:
                    try:
                        await self.session.stream(sink)
                    except Exception:
                        # Logged by the session; the stream just ends
                        pass
                    task_group.cancel_scope.cancel()

                task_group.start_soon(stream_and_cancel)
                await self._listen_for_disconnect(receive)
                disconnected = True
                task_group.cancel_scope.cancel()
        finally:
            await self.session.close()

        if (
            disconnected
            or not sink.started
            or self.session.close_reason is CloseReason.CLIENT_DISCONNECTED
        ):
            return

        try:
            await sink.finish()
        except SinkWriteError:
            return
        except Exception:
            if self.session.close_reason is CloseReason.FAILED:
                # Transport broke mid-stream; the session already logged it
                return
            raise

        if self.background is not None:
            await self.background()

    @staticmethod
    async def _listen_for_disconnect(receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
