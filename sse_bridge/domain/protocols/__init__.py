"""Domain protocols (ports) implemented by infrastructure adapters."""

from sse_bridge.domain.protocols.backplane_protocol import BackplaneProtocol
from sse_bridge.domain.protocols.logger_protocol import LoggerProtocol
from sse_bridge.domain.protocols.response_sink_protocol import ResponseSinkProtocol

__all__ = [
    "BackplaneProtocol",
    "LoggerProtocol",
    "ResponseSinkProtocol",
]
