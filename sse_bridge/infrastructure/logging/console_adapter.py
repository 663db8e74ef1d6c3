"""structlog adapter for the bridge's stream lifecycle logs.

One line per event on stdout. Development gets the colored console
renderer; every other environment gets JSON so that log shippers can
index the stream fields:

    {"event": "stream_closed", "channel": "game:abc123",
     "subscriber_id": "...", "reason": "cancelled", "frames_sent": 12,
     "service": "sse-bridge", "level": "info", "timestamp": "..."}

Sessions bind channel and subscriber_id once and every later record
carries them. Streaming errors passed to error() contribute their
error_code and channel.

Does NOT inherit from LoggerProtocol (PEP 544 structural subtyping).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from sse_bridge.domain.errors import StreamingError


def _error_fields(error: Exception) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if isinstance(error, StreamingError):
        fields["error_code"] = error.code.value
        if error.channel is not None:
            fields["channel"] = error.channel
    return fields


class ConsoleAdapter:
    """Console logger.

    Args:
        use_json: JSON lines when True, console renderer when False.
        level: Minimum level name (DEBUG, INFO, ...).
        service: Bound as "service" on every record when given.
    """

    def __init__(
        self,
        *,
        use_json: bool = False,
        level: str = "INFO",
        service: str | None = None,
    ) -> None:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ]

        if use_json:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=True))

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(
                logging.getLevelNamesMapping()[level.upper()]
            ),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
            cache_logger_on_first_use=True,
        )

        logger = structlog.get_logger()
        self._logger = logger.bind(service=service) if service else logger

    def debug(self, message: str, /, **context: Any) -> None:
        self._logger.debug(message, **context)

    def info(self, message: str, /, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error, flattening the exception into fields.

        Explicit context wins over fields derived from the exception.

        Args:
            message: Event name, e.g. "stream_failed".
            error: Exception that ended the stream, if any.
            **context: Structured key-value context.
        """
        if error is not None:
            context = {**_error_fields(error), **context}
        self._logger.error(message, **context)

    def bind(self, **context: Any) -> ConsoleAdapter:
        """Return a new adapter whose records all carry the given context.

        Args:
            **context: Fields such as channel or subscriber_id.

        Returns:
            ConsoleAdapter: New adapter; this one is unchanged.
        """
        bound_adapter = ConsoleAdapter.__new__(ConsoleAdapter)
        bound_adapter._logger = self._logger.bind(**context)
        return bound_adapter
