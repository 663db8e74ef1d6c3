"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (console/JSON)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from sse_bridge.core.config import get_settings

if TYPE_CHECKING:
    from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from sse_bridge.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        use_json=not settings.is_development,
        level="DEBUG" if settings.debug else settings.log_level,
        service=settings.app_name,
    )
